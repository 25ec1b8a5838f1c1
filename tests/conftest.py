"""Pytest fixtures for the context engine tests."""

import pytest
from core.models import Character
from infra.storage import sql_db
from infra.storage.fact_store import FactStore

from tests.scenario import PROJECT_ID, PROJECT_NAME, CHAPTER_ID, CHAPTER_TITLE, chapter_body


@pytest.fixture
def store(tmp_path):
    """An empty SQLite-backed fact store in a temporary project root."""
    return FactStore(str(tmp_path / "project"))


@pytest.fixture
def seeded_store(store):
    """Store holding the end-to-end scenario: one isekai project, two characters, one chapter."""
    root = store.project_root
    sql_db.save_project(
        root,
        PROJECT_ID,
        PROJECT_NAME,
        genre="isekai",
        description="A salaryman wakes up in another world.",
        settings={"template_settings": {"selected_template": "isekai-default"}},
    )
    sql_db.save_character(
        root,
        "c1",
        PROJECT_ID,
        "Taro",
        description="Reincarnated office worker",
        personality="冷靜、勇敢",
        background="Former salaryman from Tokyo",
        relationships=[
            {"target_character_id": "c2", "relationship_type": "friend", "description": "與Hanako是青梅竹馬"},
        ],
    )
    sql_db.save_character(
        root,
        "c2",
        PROJECT_ID,
        "Hanako",
        description="Village healer",
        personality="開朗",
    )
    sql_db.save_chapter(root, CHAPTER_ID, PROJECT_ID, title=CHAPTER_TITLE, content=chapter_body(), order_num=1)
    return store


@pytest.fixture
def broken_roster_store(seeded_store):
    """Seeded store whose characters table has been dropped, so roster reads fail."""
    engine = sql_db.get_engine(seeded_store.project_root)
    Character.__table__.drop(engine)
    return seeded_store


@pytest.fixture
def corrupt_store(tmp_path):
    """Store whose content.db holds bytes that are not an SQLite database."""
    root = tmp_path / "corrupt"
    root.mkdir()
    (root / "content.db").write_bytes(b"this is not an sqlite database\n" * 64)
    return FactStore(str(root))
