import pytest

from rudr.scopes import ComponentRef, Scope, convert_owner_ref


def _owner(**extra):
    owner = {
        "apiVersion": "core.oam.dev/v1alpha1",
        "kind": "ApplicationConfiguration",
        "name": "app",
        "uid": "uid-1",
    }
    owner.update(extra)
    return owner


def test_convert_owner_ref_defaults_flags_to_false():
    converted = convert_owner_ref(_owner())
    assert converted["controller"] is False
    assert converted["blockOwnerDeletion"] is False


def test_convert_owner_ref_keeps_identity_fields():
    converted = convert_owner_ref(_owner())
    assert converted["name"] == "app"
    assert converted["kind"] == "ApplicationConfiguration"
    assert converted["apiVersion"] == "core.oam.dev/v1alpha1"
    assert converted["uid"] == "uid-1"


def test_convert_owner_ref_keeps_set_flags():
    converted = convert_owner_ref(_owner(controller=True, blockOwnerDeletion=True))
    assert converted["controller"] is True
    assert converted["blockOwnerDeletion"] is True


def test_convert_owner_ref_none_flags_become_false():
    converted = convert_owner_ref(_owner(controller=None, blockOwnerDeletion=None))
    assert converted["controller"] is False
    assert converted["blockOwnerDeletion"] is False


def test_convert_owner_ref_requires_name():
    owner = _owner()
    del owner["name"]
    with pytest.raises(KeyError):
        convert_owner_ref(owner)


def test_scope_is_abstract():
    with pytest.raises(TypeError):
        Scope()


def test_component_ref_equality_by_fields():
    assert ComponentRef("comp", "inst") == ComponentRef("comp", "inst")
    assert ComponentRef("comp", "inst") != ComponentRef("comp", "other")