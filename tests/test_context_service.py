"""Tests for the context service facade and pipeline."""

import pytest
from core.exceptions import NotFoundError
from core.schemas import QualityReport
from services import ContextService
from infra.storage import sql_db
from tests.scenario import PROJECT_ID, PROJECT_NAME, CHAPTER_ID, chapter_body

CONFIG = {"context": {"max_length": 8000}, "storage": {"project_root": "unused"}}


def test_four_core_operations(seeded_store):
    service = ContextService(seeded_store, CONFIG)

    context = service.build_context(PROJECT_ID, CHAPTER_ID, 100)
    compressed = service.compress_context(context, 50)
    report = service.analyze_quality(context)
    issues = service.check_consistency("Taro 衝動地行動。", PROJECT_ID)

    assert PROJECT_NAME in compressed and len(compressed) <= 50
    assert isinstance(report, QualityReport)
    assert 0 <= report.overall_quality <= 100
    assert len(issues) == 1


def test_prepare_context_within_budget_is_untouched(seeded_store):
    service = ContextService(seeded_store, CONFIG)

    prepared = service.prepare_context(PROJECT_ID, CHAPTER_ID, 100)

    assert not prepared.compressed
    assert prepared.context == service.build_context(PROJECT_ID, CHAPTER_ID, 100)
    assert prepared.original_length == len(prepared.context)


def test_prepare_context_compresses_over_budget(seeded_store):
    service = ContextService(seeded_store, CONFIG)

    prepared = service.prepare_context(PROJECT_ID, CHAPTER_ID, 100, max_length=300)

    assert prepared.compressed
    assert len(prepared.context) <= 300
    assert prepared.original_length > 300
    assert PROJECT_NAME in prepared.context
    assert prepared.report.total_tokens == service.analyze_quality(prepared.context).total_tokens


def test_prepare_context_uses_configured_budget(seeded_store):
    service = ContextService(seeded_store, {"context": {"max_length": 120}})

    prepared = service.prepare_context(PROJECT_ID, CHAPTER_ID, 100)

    assert prepared.compressed
    assert len(prepared.context) <= 120


def test_prepare_context_propagates_not_found(seeded_store):
    with pytest.raises(NotFoundError):
        ContextService(seeded_store, CONFIG).prepare_context("nope", CHAPTER_ID, 0)


def test_context_stats(seeded_store):
    stats = ContextService(seeded_store, CONFIG).get_context_stats(PROJECT_ID)

    assert stats.chapter_count == 1
    assert stats.character_count == 2
    assert stats.total_characters == len(chapter_body())
    assert stats.estimated_tokens == -(-stats.total_characters // 4)


def test_context_stats_degrade_on_roster_failure(broken_roster_store):
    stats = ContextService(broken_roster_store, CONFIG).get_context_stats(PROJECT_ID)

    assert stats.chapter_count == 1
    assert stats.character_count == 0


def test_relevant_characters(seeded_store):
    service = ContextService(seeded_store, CONFIG)

    assert [c.name for c in service.get_relevant_characters(PROJECT_ID, "Hanako 與 Taro 同行")] == ["Taro", "Hanako"]
    assert service.get_relevant_characters(PROJECT_ID, "無人") == []


def test_relevant_characters_degrade_on_failure(broken_roster_store):
    assert ContextService(broken_roster_store, CONFIG).get_relevant_characters(PROJECT_ID, "Taro") == []


def test_from_config_binds_project_root(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root = str(tmp_path / "novel")

    service = ContextService.from_config({"storage": {"project_root": root}})

    assert service.store.project_root == root


def test_relevant_characters_match_aliases(seeded_store):
    sql_db.save_character(seeded_store.project_root, "c3", PROJECT_ID, "Kenji", description="鐵匠，外號：老鐵")
    service = ContextService(seeded_store, CONFIG)

    assert [c.name for c in service.get_relevant_characters(PROJECT_ID, "老鐵敲打著劍")] == ["Kenji"]


def test_detect_new_characters_excludes_known_roster(seeded_store):
    service = ContextService(seeded_store, CONFIG)
    text = "Taro 對 Hanako 說起 Kenji 的事。"

    assert service.detect_new_characters(text) == ["Taro", "Hanako", "Kenji"]
    assert service.detect_new_characters(text, PROJECT_ID) == ["Kenji"]


def test_detect_new_characters_without_roster(broken_roster_store):
    service = ContextService(broken_roster_store, CONFIG)

    assert service.detect_new_characters("Taro met Kenji.", PROJECT_ID) == ["Taro", "Kenji"]


def test_integrate_relevant_characters(seeded_store):
    """Characters found in the text are appended with their full details."""
    sql_db.save_character(
        seeded_store.project_root, "c3", PROJECT_ID, "Kenji",
        description="鐵匠", appearance="滿臉鬍鬚", role="配角",
    )
    service = ContextService(seeded_store, CONFIG)
    context = service.build_context(PROJECT_ID, CHAPTER_ID, 100)

    merged = service.integrate_characters(context, service.get_relevant_characters(PROJECT_ID, "Kenji 回來了"))

    assert merged.startswith(context)
    assert "相關角色詳細資訊：\n\nKenji：\n  描述：鐵匠\n  外貌：滿臉鬍鬚\n  角色：配角\n" in merged
    assert "\nTaro：\n" not in merged


def test_extract_relevant_content_through_service(seeded_store):
    lines = chapter_body().split("\n")

    window = ContextService(seeded_store, CONFIG).extract_relevant_content(chapter_body(), 100)

    assert window == "\n".join(lines[50:150])


def test_unreadable_database_degrades_everywhere(corrupt_store):
    """A corrupt content.db never leaks a driver exception out of the service."""
    service = ContextService(corrupt_store, CONFIG)

    stats = service.get_context_stats(PROJECT_ID)

    assert (stats.chapter_count, stats.character_count, stats.estimated_tokens) == (0, 0, 0)
    assert service.get_relevant_characters(PROJECT_ID, "Taro") == []
    assert service.check_consistency("Taro 衝動地行動。", PROJECT_ID) == []
    with pytest.raises(NotFoundError):
        service.build_context(PROJECT_ID, CHAPTER_ID, 0)
