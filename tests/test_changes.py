import pytest

from leptosbuild.changes import Change, ChangeSet


def test_all_changes_order():
    assert list(ChangeSet.all_changes()) == [
        Change.BIN_SOURCE,
        Change.LIB_SOURCE,
        Change.STYLE,
        Change.CONF,
        Change.ASSET,
    ]


def test_all_changes_excludes_additional():
    assert Change.ADDITIONAL not in ChangeSet.all_changes()


def test_new_set_is_empty():
    changes = ChangeSet()
    assert changes.is_empty()
    assert len(changes) == 0
    assert not changes.need_server_build()
    assert not changes.need_front_build()
    assert not changes.need_assets_change()
    assert not changes.need_style_build(True, True)


def test_add_reports_novelty():
    changes = ChangeSet()
    assert changes.add(Change.STYLE) is True
    assert changes.add(Change.STYLE) is False
    assert len(changes) == 1


def test_clear_empties():
    changes = ChangeSet.all_changes()
    changes.clear()
    assert changes.is_empty()


@pytest.mark.parametrize(
    "change, server, front",
    [
        (Change.BIN_SOURCE, True, False),
        (Change.LIB_SOURCE, False, True),
        (Change.CONF, True, True),
        (Change.ADDITIONAL, True, True),
        (Change.ASSET, False, False),
        (Change.STYLE, False, False),
    ],
)
def test_server_and_front_needs(change, server, front):
    changes = ChangeSet([change])
    assert changes.need_server_build() is server
    assert changes.need_front_build() is front


def test_need_style_build():
    style = ChangeSet([Change.STYLE])
    assert style.need_style_build(True, False)
    assert not style.need_style_build(False, True)
    lib = ChangeSet([Change.LIB_SOURCE])
    assert lib.need_style_build(False, True)
    assert not lib.need_style_build(True, False)


def test_need_assets_change():
    assert ChangeSet([Change.ASSET]).need_assets_change()
    assert not ChangeSet([Change.STYLE]).need_assets_change()


def test_constructor_deduplicates_and_copy_is_independent():
    changes = ChangeSet([Change.ASSET, Change.ASSET, Change.CONF])
    assert list(changes) == [Change.ASSET, Change.CONF]
    copied = changes.copy()
    copied.clear()
    assert len(changes) == 2
    assert copied == ChangeSet()