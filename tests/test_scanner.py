from __future__ import annotations

from webresources.scanner import SourceReferenceScanner

VIEW_SOURCE = """
Ext.define('App.view.Main', {
    extend: 'Ext.panel.Panel',
    requires: [
        'App.store.Users',
        "App.view.Header"
    ],
    uses: ['App.util.Format'],
    controller: 'App.controller.Main',
    model: 'App.model.User',
    title: 'Main'
});
"""


def test_scan_collects_definition_and_references() -> None:
    result = SourceReferenceScanner().scan(VIEW_SOURCE)

    assert result.defined_class == "App.view.Main"
    assert result.references == {
        "Ext.panel.Panel",
        "App.store.Users",
        "App.view.Header",
        "App.util.Format",
        "App.controller.Main",
        "App.model.User",
    }


def test_scan_without_patterns_yields_nothing() -> None:
    result = SourceReferenceScanner().scan("var plain = 1;")

    assert result.defined_class is None
    assert result.references == frozenset()


def test_only_first_definition_is_reported() -> None:
    source = "Ext.define('App.First', {});\nExt.define('App.Second', {});"

    result = SourceReferenceScanner().scan(source)

    assert result.defined_class == "App.First"


def test_double_quoted_definition_with_spacing() -> None:
    source = 'Ext.define( "App.Spaced" , { extend : "App.Base" });'

    result = SourceReferenceScanner().scan(source)

    assert result.defined_class == "App.Spaced"
    assert result.references == {"App.Base"}


def test_empty_requires_list() -> None:
    result = SourceReferenceScanner().scan(
        "Ext.define('App.A', { requires: [] });"
    )

    assert result.references == frozenset()
