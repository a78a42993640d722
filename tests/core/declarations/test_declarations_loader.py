# tests/core/declarations/test_declarations_loader.py
from __future__ import annotations

import sys
import types
from pathlib import Path

import pytest

from celine.projection.contracts.declaration import EmbedPolicy, ViewDeclaration
from celine.projection.core.declarations.config import (
    ComputedEntry,
    DeclarationsConfig,
    RelationshipEntry,
    ViewSpec,
    load_declarations_config,
)
from celine.projection.core.declarations.loader import load_and_register_declarations
from celine.projection.core.declarations.registry import DeclarationRegistry
from celine.projection.core.errors import DeclarationConfigError
from celine.projection.core.resolver import ViewResolver
from tests.helpers.catalog import (
    Comment,
    Item,
    ItemPresenter,
    approved_comments,
    item_url,
    viewer_is_premium,
)

VIEWS_YAML = """
views:
  commentable:
    abstract: true
    relationships:
      comments:
        embed: ids
        source: tests.helpers.catalog:approved_comments

  comment:
    entity: tests.helpers.catalog:Comment
    fields: [id, body]

  item:
    entity: tests.helpers.catalog:Item
    fields: [id, name]
    include: [commentable]
    presenter: tests.helpers.catalog:ItemPresenter
    computed:
      url: tests.helpers.catalog:item_url
      discounted_price:
        function: tests.helpers.catalog:discounted_price
        if: tests.helpers.catalog:viewer_is_premium
    relationships:
      pictures:
        embed: ids
        sideload: true
      owner: omit
"""


class TestLoadAndRegister:
    def test_full_yaml_pipeline(self, tmp_path: Path):
        config_file = tmp_path / "views.yaml"
        config_file.write_text(VIEWS_YAML, encoding="utf-8")

        registry = load_and_register_declarations(
            cfg=load_declarations_config([str(config_file)])
        )

        assert [d.name for d in registry] == ["comment", "item"]
        assert "commentable" not in registry
        assert registry.for_type(Item).name == "item"
        assert registry.for_type(Comment).name == "comment"

        item = registry.get("item")
        assert item.presenter is ItemPresenter
        assert [c.name for c in item.computed] == ["url", "discounted_price"]
        assert item.computed[0].func is item_url
        assert item.computed[1].condition is viewer_is_premium

        rels = {r.name: r for r in item.relationships}
        assert rels["pictures"].sideload is True
        assert rels["owner"].policy is EmbedPolicy.OMIT
        # included from the fragment
        assert rels["comments"].policy is EmbedPolicy.INLINE_IDS
        assert rels["comments"].source is approved_comments

    def test_populates_given_registry(self):
        registry = DeclarationRegistry()
        cfg = DeclarationsConfig(views=[ViewSpec(name="item", fields=("id",))])

        result = load_and_register_declarations(cfg=cfg, registry=registry)

        assert result is registry
        assert registry.get("item").fields == ("id",)

    def test_own_entries_win_over_fragment(self):
        cfg = DeclarationsConfig(
            views=[
                ViewSpec(
                    name="base",
                    abstract=True,
                    fields=("id",),
                    relationships=(RelationshipEntry(name="comments", embed="ids"),),
                ),
                ViewSpec(
                    name="item",
                    include=("base",),
                    fields=("id", "name"),
                    relationships=(RelationshipEntry(name="comments", embed="omit"),),
                ),
            ]
        )

        item = load_and_register_declarations(cfg=cfg).get("item")

        assert item.fields == ("id", "name")
        assert [r.policy for r in item.relationships] == [EmbedPolicy.OMIT]

    def test_fragment_default_embed_survives_include(self, tmp_path: Path, item):
        config_file = tmp_path / "views.yaml"
        config_file.write_text(
            "views:\n"
            "  commentable:\n"
            "    abstract: true\n"
            "    embed: ids\n"
            "    relationships:\n"
            "      comments:\n"
            "  item:\n"
            "    fields: [id]\n"
            "    root: false\n"
            "    include: [commentable]\n",
            encoding="utf-8",
        )
        registry = load_and_register_declarations(
            cfg=load_declarations_config([str(config_file)])
        )

        out = ViewResolver(registry).resolve(item, "item")

        assert out == {"id": 1, "comments": [1, 2]}

    def test_nested_includes(self):
        cfg = DeclarationsConfig(
            views=[
                ViewSpec(name="a", abstract=True, fields=("a",)),
                ViewSpec(name="b", abstract=True, include=("a",), fields=("b",)),
                ViewSpec(name="c", include=("b",), fields=("c",)),
            ]
        )

        fields = load_and_register_declarations(cfg=cfg).get("c").fields

        assert set(fields) == {"a", "b", "c"}

    def test_include_of_code_registered_fragment(self):
        registry = DeclarationRegistry()
        registry.register(ViewDeclaration(name="timestamps", fields=("created_at",)))
        cfg = DeclarationsConfig(
            views=[ViewSpec(name="item", include=("timestamps",), fields=("id",))]
        )

        item = load_and_register_declarations(cfg=cfg, registry=registry).get("item")

        assert "created_at" in item.fields

    def test_include_cycle_raises(self):
        cfg = DeclarationsConfig(
            views=[
                ViewSpec(name="a", include=("b",)),
                ViewSpec(name="b", include=("a",)),
            ]
        )

        with pytest.raises(DeclarationConfigError, match="Include cycle detected: a -> b -> a"):
            load_and_register_declarations(cfg=cfg)

    def test_unknown_include_raises(self):
        cfg = DeclarationsConfig(views=[ViewSpec(name="item", include=("ghost",))])

        with pytest.raises(DeclarationConfigError, match="'ghost' is not declared"):
            load_and_register_declarations(cfg=cfg)

    def test_unknown_relationship_view_raises(self):
        cfg = DeclarationsConfig(
            views=[
                ViewSpec(
                    name="item",
                    relationships=(RelationshipEntry(name="comments", view="ghost"),),
                )
            ]
        )

        with pytest.raises(DeclarationConfigError, match="references unknown view 'ghost'"):
            load_and_register_declarations(cfg=cfg)

    def test_relationship_view_declared_later(self):
        cfg = DeclarationsConfig(
            views=[
                ViewSpec(
                    name="item",
                    relationships=(RelationshipEntry(name="comments", view="comment"),),
                ),
                ViewSpec(name="comment", fields=("id",)),
            ]
        )

        registry = load_and_register_declarations(cfg=cfg)

        assert registry.get("item").relationships[0].view == "comment"

    def test_duplicate_keys_become_config_error(self):
        cfg = DeclarationsConfig(
            views=[
                ViewSpec(
                    name="item",
                    fields=("url",),
                    computed=(ComputedEntry(name="url", function="tests.helpers.catalog:item_url"),),
                )
            ]
        )

        with pytest.raises(DeclarationConfigError, match="Invalid view 'item'"):
            load_and_register_declarations(cfg=cfg)

    def test_bad_import_path_raises(self):
        cfg = DeclarationsConfig(
            views=[ViewSpec(name="item", entity="tests.helpers.catalog:Nope")]
        )

        with pytest.raises(AttributeError):
            load_and_register_declarations(cfg=cfg)

    def test_end_to_end_projection(self, tmp_path: Path, item, ctx):
        config_file = tmp_path / "views.yaml"
        config_file.write_text(VIEWS_YAML, encoding="utf-8")
        registry = load_and_register_declarations(
            cfg=load_declarations_config([str(config_file)])
        )

        out = ViewResolver(registry).resolve(item, context=ctx)

        assert out["item"] == {
            "id": 1,
            "name": "chair",
            "url": "/items/1",
            "pictures": [10, 11],
            "comments": [1],
        }
        assert out["pictures"] == [
            {"id": 10, "url": "/p/10.png"},
            {"id": 11, "url": "/p/11.png"},
        ]

    def test_imports_from_injected_module(self, monkeypatch):
        module = types.ModuleType("shop_models")

        class Invoice:
            def __init__(self, id):
                self.id = id

        module.Invoice = Invoice
        module.invoice_total = lambda invoice, ctx: 42
        monkeypatch.setitem(sys.modules, "shop_models", module)
        cfg = DeclarationsConfig(
            views=[
                ViewSpec(
                    name="invoice",
                    entity="shop_models:Invoice",
                    fields=("id",),
                    computed=(ComputedEntry(name="total", function="shop_models:invoice_total"),),
                )
            ]
        )

        registry = load_and_register_declarations(cfg=cfg)

        out = ViewResolver(registry).resolve(Invoice(3))
        assert out == {"invoice": {"id": 3, "total": 42}}
