"""Tests for the score endpoints."""

from typing import Any

import pytest
from httpx import AsyncClient


def degraded_payload() -> dict[str, Any]:
    return {
        "vitals": {"lcp": 6000, "cls": 0.4, "fcp": 4000, "tbt": 900},
        "sections": [
            {
                "name": f"section-{n}",
                "complexity_score": 90,
                "has_video": True,
                "liquid_loops": 10,
            }
            for n in range(1, 6)
        ],
        "theme": {"total_sections": 5},
    }


class TestCalculateScore:
    """POST /v1/scores"""

    @pytest.mark.asyncio
    async def test_perfect_theme(self, client: AsyncClient, score_payload) -> None:
        response = await client.post("/v1/scores", json=score_payload)

        assert response.status_code == 200
        body = response.json()
        data = body["data"]
        assert data["overall"] == 96
        assert data["speed"]["score"] == 100
        assert data["quality"]["score"] == 95
        assert data["conversion"]["score"] == 90
        assert data["status"]["status"] == "excellent"
        assert body["meta"] == {"has_vitals": True, "sections": 1}

    @pytest.mark.asyncio
    async def test_vitals_details_reported(self, client: AsyncClient, score_payload) -> None:
        response = await client.post("/v1/scores", json=score_payload)

        details = response.json()["data"]["speed"]["details"]
        assert set(details) >= {"lcp", "cls", "fcp", "tbt"}
        assert details["lcp"]["status"] == "good"

    @pytest.mark.asyncio
    async def test_without_vitals(self, client: AsyncClient, score_payload) -> None:
        score_payload.pop("vitals")

        response = await client.post("/v1/scores", json=score_payload)

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["speed"]["score"] == 90
        assert body["data"]["speed"]["details"] is None
        assert body["meta"]["has_vitals"] is False

    @pytest.mark.asyncio
    async def test_empty_body_scores_neutral(self, client: AsyncClient) -> None:
        response = await client.post("/v1/scores", json={})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["overall"] == 87
        assert data["speed"]["score"] == 90
        assert data["quality"]["score"] == 93
        assert data["conversion"]["score"] == 73

    @pytest.mark.asyncio
    async def test_degraded_theme(self, client: AsyncClient) -> None:
        response = await client.post("/v1/scores", json=degraded_payload())

        data = response.json()["data"]
        assert data["overall"] < 50
        assert data["status"]["status"] == "needs-work"
        assert data["quality"]["issue_count"] == 13
        assert len(data["quality"]["issues"]) == 5
        assert data["conversion"]["estimated_monthly_loss"] > 0

    @pytest.mark.asyncio
    async def test_scores_are_bounded(self, client: AsyncClient) -> None:
        payload = {
            "vitals": {"lcp": -100, "cls": -1, "fcp": -5, "tbt": -10},
            "sections": [{"name": "x", "complexity_score": 500, "liquid_loops": 1000}],
        }

        response = await client.post("/v1/scores", json=payload)

        data = response.json()["data"]
        for value in (
            data["overall"],
            data["speed"]["score"],
            data["quality"]["score"],
            data["conversion"]["score"],
        ):
            assert 0 <= value <= 100

    @pytest.mark.asyncio
    async def test_missing_vital_rejected(self, client: AsyncClient) -> None:
        response = await client.post("/v1/scores", json={"vitals": {"lcp": 1200}})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_section_requires_name(self, client: AsyncClient) -> None:
        response = await client.post("/v1/scores", json={"sections": [{"type": "hero"}]})

        assert response.status_code == 422
        assert response.json()["error"]["field"] == "sections.0.name"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("body", "field"),
        [
            (b'{"vitals": {"lcp": NaN, "cls": NaN, "fcp": NaN, "tbt": NaN}}', "vitals.lcp"),
            (b'{"vitals": {"lcp": 1e400, "cls": 0.1, "fcp": 800, "tbt": 50}}', "vitals.lcp"),
            (b'{"sections": [{"name": "hero", "complexity_score": NaN}]}', "sections.0.complexity_score"),
            (b'{"context": {"monthly_revenue": 1e400}}', "context.monthly_revenue"),
            (b'{"context": {"monthly_revenue": -1}}', "context.monthly_revenue"),
        ],
    )
    async def test_non_finite_numbers_rejected(
        self, client: AsyncClient, body: bytes, field: str
    ) -> None:
        response = await client.post(
            "/v1/scores", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422
        assert response.json()["error"]["field"] == field


class TestCompareScores:
    """POST /v1/scores/compare"""

    @pytest.mark.asyncio
    async def test_improvement(self, client: AsyncClient, score_payload) -> None:
        response = await client.post(
            "/v1/scores/compare",
            json={
                "previous": degraded_payload(),
                "current": score_payload,
                "previous_run_date": "2026-01-01T00:00:00Z",
                "current_run_date": "2026-01-15T00:00:00Z",
            },
        )

        assert response.status_code == 200
        data = response.json()["data"]
        delta = data["delta"]
        assert data["current"]["overall"] == 96
        assert delta["current_overall"] == 96
        assert delta["overall_delta"] == 96 - data["previous"]["overall"]
        assert delta["direction"] == "improved"
        assert delta["significance"] == "major"
        assert delta["status_improved"] is True
        assert delta["days_between_runs"] == 14

    @pytest.mark.asyncio
    async def test_unchanged(self, client: AsyncClient, score_payload) -> None:
        response = await client.post(
            "/v1/scores/compare",
            json={"previous": score_payload, "current": score_payload},
        )

        delta = response.json()["data"]["delta"]
        assert delta["overall_delta"] == 0
        assert delta["direction"] == "unchanged"
        assert delta["days_between_runs"] == 0


class TestScoreStatus:
    """GET /v1/scores/status/{score}"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("score", "expected"),
        [("85", "excellent"), ("80", "excellent"), ("70", "good"), ("50", "fair"), ("49.5", "needs-work")],
    )
    async def test_bands(self, client: AsyncClient, score: str, expected: str) -> None:
        response = await client.get(f"/v1/scores/status/{score}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == expected
        assert data["score"] == float(score)
        assert data["label"]

    @pytest.mark.asyncio
    async def test_out_of_range(self, client: AsyncClient) -> None:
        response = await client.get("/v1/scores/status/101")

        assert response.status_code == 422
