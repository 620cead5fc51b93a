"""Tests for pixshell.spec — the Specification record."""

import dataclasses

import pytest

from pixshell.spec import DEPENDENCY_FIELDS, RESERVED_FIELDS, Specification


def test_of_splits_known_and_extra():
    spec = Specification.of({
        "name": "hello",
        "nativeBuildInputs": ["gcc"],
        "shellHook": "echo hi",
        "doCheck": True,
    })
    assert spec.name == "hello"
    assert spec.native_build_inputs == ("gcc",)
    assert spec.shell_hook == "echo hi"
    assert spec.extra == {"doCheck": True}


def test_of_keyword_arguments():
    spec = Specification.of({"name": "a"}, name="b", LANG="C")
    assert spec.name == "b"
    assert spec.get("LANG") == "C"


def test_sequences_become_tuples():
    spec = Specification(build_inputs=["a", "b"], phases=["buildPhase"])
    assert spec.build_inputs == ("a", "b")
    assert spec.phases == ("buildPhase",)


def test_frozen():
    spec = Specification(name="hello")
    with pytest.raises(dataclasses.FrozenInstanceError):
        spec.name = "world"
    with pytest.raises(TypeError):
        spec.extra["x"] = 1


def test_extra_is_copied():
    extra = {"LANG": "C"}
    spec = Specification(extra=extra)
    extra["LANG"] = "en_US"
    assert spec.get("LANG") == "C"


def test_extra_cannot_shadow_fields():
    with pytest.raises(ValueError):
        Specification(extra={"shellHook": "echo"})


def test_get_by_nix_name():
    spec = Specification(propagated_build_inputs=["zlib"], extra={"strictDeps": True})
    assert spec.get("propagatedBuildInputs") == ("zlib",)
    assert spec.get("strictDeps") is True
    assert spec.get("shellHook") is None
    assert spec.get("shellHook", "") == ""
    assert spec.get("missing", 42) == 42


def test_to_dict_omits_unset_optionals():
    attrs = Specification(name="hello", build_inputs=["gcc"]).to_dict()
    assert attrs["name"] == "hello"
    assert attrs["buildInputs"] == ["gcc"]
    assert attrs["nativeBuildInputs"] == []
    assert "src" not in attrs
    assert "shellHook" not in attrs
    assert "phases" not in attrs


def test_to_dict_of_roundtrip():
    attrs = {"name": "x", "packages": ["jq"], "shellHook": "h", "phases": ["buildPhase"], "k": "v"}
    assert Specification.of(attrs).to_dict() == {
        **{attr: [] for attr in DEPENDENCY_FIELDS},
        "inputsFrom": [],
        **attrs,
    }


def test_identity_equality():
    """Equal fields do not make two specs the same dependency."""
    a = Specification(name="lib")
    b = Specification(name="lib")
    assert a != b
    assert a == a
    assert len({a, b}) == 2


def test_override():
    spec = Specification(name="hello", build_inputs=["gcc"], extra={"doCheck": True})
    spec2 = spec.override(name="world", doCheck=False)
    assert spec2.name == "world"
    assert spec2.build_inputs == ("gcc",)
    assert spec2.get("doCheck") is False
    assert spec.name == "hello"


def test_override_keeps_source_identity():
    lib = Specification(name="lib")
    spec = Specification(inputs_from=[lib]).override({"shellHook": "x"})
    assert spec.inputs_from[0] is lib


def test_str_is_name():
    assert str(Specification(name="hello")) == "hello"
    assert str(Specification()) == ""


def test_reserved_fields():
    assert RESERVED_FIELDS == {
        "name", "packages", "inputsFrom", "shellHook",
        "buildInputs", "nativeBuildInputs",
        "propagatedBuildInputs", "propagatedNativeBuildInputs",
    }
    assert "src" not in RESERVED_FIELDS
    assert "phases" not in RESERVED_FIELDS


def test_extra_values_are_shared():
    """Read-only at the top level only: nested values are the caller's."""
    meta = {"description": "hello"}
    spec = Specification(extra={"meta": meta})
    assert spec.get("meta") is meta
