"""Tests for return-on-investment computation and the returns endpoint."""

import math

import pytest

from main import compute_roi


class TestComputeRoi:

    @pytest.mark.parametrize("initial,current,expected", [
        (100, 150, 50.0),
        (200, 150, -25.0),
        (80, 80, 0.0),
        (1000, 1234.5, 23.45),
    ])
    def test_percent_return(self, initial, current, expected):
        assert compute_roi(initial, current) == pytest.approx(expected)

    def test_zero_initial_with_gain_is_positive_infinity(self):
        assert compute_roi(0, 10) == math.inf

    def test_zero_initial_with_loss_is_negative_infinity(self):
        assert compute_roi(0, -5) == -math.inf

    def test_zero_initial_without_change_is_nan(self):
        assert math.isnan(compute_roi(0, 0))


def test_returns_endpoint(client, signup):
    headers, _ = signup()
    client.post("/api/investments/add", json={"type": "Stocks", "initialAmount": 100, "currentValue": 150}, headers=headers)
    client.post("/api/investments/add", json={"type": "Crypto", "initialAmount": 400, "currentValue": 100}, headers=headers)

    resp = client.get("/api/investments/returns", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == [
        {"type": "Stocks", "roi": 50.0},
        {"type": "Crypto", "roi": -75.0},
    ]


def test_zero_initial_amount_renders_null(client, signup):
    headers, _ = signup()
    client.post("/api/investments/add", json={"type": "Gift", "initialAmount": 0, "currentValue": 10}, headers=headers)
    resp = client.get("/api/investments/returns", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == [{"type": "Gift", "roi": None}]


def test_returns_only_cover_callers_investments(client, signup):
    ana, _ = signup(email="ana@example.com")
    ben, _ = signup(email="ben@example.com")
    client.post("/api/investments/add", json={"type": "Bonds", "initialAmount": 100, "currentValue": 110}, headers=ana)
    client.post("/api/investments/add", json={"type": "REIT", "initialAmount": 100, "currentValue": 90}, headers=ben)

    assert client.get("/api/investments/returns", headers=ana).json() == [{"type": "Bonds", "roi": pytest.approx(10.0)}]
    assert client.get("/api/investments/returns", headers=ben).json() == [{"type": "REIT", "roi": pytest.approx(-10.0)}]
