# tests/unit/api/test_unit_models.py — v2
"""Tests for api/models.py — request/response models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from reelforge.api.models import BrandConfigUpdate, RunResponse


class TestBrandConfigUpdate:
    def test_all_optional(self):
        assert BrandConfigUpdate().model_dump(exclude_none=True) == {}

    def test_forbids_unknown(self):
        with pytest.raises(ValidationError):
            BrandConfigUpdate(font="Arial")

    def test_literal_fields(self):
        with pytest.raises(ValidationError):
            BrandConfigUpdate(video_style="baroque")


class TestRunResponse:
    def test_error_payload(self):
        body = RunResponse(ok=False, error="boom").model_dump(mode="json")
        assert body == {"ok": False, "result": None, "error": "boom"}

    def test_result_payload(self, record_factory):
        body = RunResponse(ok=True, result=record_factory("r1")).model_dump(mode="json")
        assert body["result"]["id"] == "r1"
