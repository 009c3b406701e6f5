"""Unit tests for CUID generation utilities."""

from __future__ import annotations

from app.core.ids import generate_cuid, generate_run_id


def test_generate_cuid_format_and_uniqueness() -> None:
    ids = [generate_cuid() for _ in range(200)]

    assert len(ids) == len(set(ids))
    assert all(len(item) == 24 for item in ids)
    assert all(item.startswith("c") for item in ids)
    assert all(item.isalnum() and item == item.lower() for item in ids)


def test_generate_run_id_is_prefixed_cuid() -> None:
    run_ids = {generate_run_id() for _ in range(50)}

    assert len(run_ids) == 50
    assert all(run_id.startswith("run_c") for run_id in run_ids)
    assert all(len(run_id) == len("run_") + 24 for run_id in run_ids)
