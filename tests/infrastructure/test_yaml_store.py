from datetime import date

import pytest
import yaml

from deckwise.domain.models import StudySession
from deckwise.infrastructure.store import YamlStore


def test_missing_file_starts_empty(tmp_path):
    store = YamlStore.load(tmp_path / "missing.yaml")
    assert store.cards.all() == []
    assert store.reviews.all() == []


def test_non_mapping_document_is_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        YamlStore.load(path)


@pytest.mark.asyncio
async def test_save_writes_plain_yaml(tmp_path, make_card, make_review, now):
    path = tmp_path / "nested" / "data.yaml"
    store = YamlStore(path)
    await store.cards.add(make_card(due_in_days=3, repetition=1, interval=1))
    await store.reviews.append(make_review(now, 5))
    await store.sessions.record(StudySession("u1", "d1", date(2024, 3, 10), 7, 420.0))

    store.save()

    raw = yaml.safe_load(path.read_text())
    assert raw["cards"][0]["id"] == "c1"
    assert raw["cards"][0]["due_date"].startswith("2024-03-13T12:00:00")
    assert raw["reviews"][0]["quality_rating"] == 5
    assert raw["sessions"][0]["session_date"] == "2024-03-10"
    assert not path.with_suffix(".yaml.tmp").exists()


@pytest.mark.asyncio
async def test_reload_restores_state(tmp_path, make_card, make_review, now):
    path = tmp_path / "data.yaml"
    store = YamlStore(path)
    await store.cards.add(make_card(due_in_days=3, repetition=1, interval=1, version=2))
    await store.reviews.append(make_review(now, 1))
    store.save()

    loaded = YamlStore.load(path)

    card = await loaded.cards.get("c1")
    assert card == make_card(due_in_days=3, repetition=1, interval=1, version=2)
    assert loaded.reviews.all()[0].timestamp == now
    assert loaded.reviews.all()[0].passed is False
