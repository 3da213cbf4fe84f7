"""
E2E journeys through the HTTP surface with a bearer token and a fake backend.

Members:
- saver: signs in, creates a goal and pays into it from a linked account
- collector: climbs to silver and redeems a reward exactly once
"""

from fastapi.testclient import TestClient

from factories import account_row, auth_user_json, goal_row, reward_row, session_json

BEARER = {"Authorization": "Bearer user-token"}


def test_saver_journey(client: TestClient, backend):
    """
    saver: £500 in a linked account, £1000 goal
    Expected: payment moves £200, second payment larger than balance is refused
    """
    backend.on("POST", "/auth/v1/token", json=session_json())
    backend.on("GET", "/auth/v1/user", json=auth_user_json())
    backend.on("POST", "/rest/v1/goals", json=[goal_row(saved_amount=0)], status_code=201)
    backend.on("GET", "/rest/v1/accounts", json=[account_row(balance=500)])
    backend.on("PATCH", "/rest/v1/accounts", json=[account_row(balance=300)])
    backend.on("PATCH", "/rest/v1/goals", json=[goal_row(saved_amount=200)])

    signed_in = client.post("/v1/auth/signin", json={"email": "jo@example.com", "password": "secret1"})
    assert signed_in.status_code == 200

    created = client.post(
        "/v1/goals",
        headers=BEARER,
        json={"name": "Holiday fund", "target_amount": 1000, "frequency": "monthly", "linked_account_id": "acc-1"},
    )
    assert created.status_code == 201

    paid = client.post("/v1/goals/goal-1/payments", headers=BEARER, json={"amount": 200})
    assert paid.status_code == 200
    assert paid.json()["goal"]["progress_percentage"] == 20.0
    assert paid.json()["account"]["balance"] == 300.0

    # The account is now known with £300, so £400 is refused without any write
    writes_before = len(backend.calls("PATCH", "/rest/v1/accounts"))
    refused = client.post("/v1/goals/goal-1/payments", headers=BEARER, json={"amount": 400})
    assert refused.status_code == 422
    assert len(backend.calls("PATCH", "/rest/v1/accounts")) == writes_before

    goals = client.get("/v1/goals/goal-1", headers=BEARER)
    assert goals.json()["saved_amount"] == 200.0


def test_collector_journey(client: TestClient, backend):
    """
    collector: 1200 points, two rewards
    Expected: silver tier, the affordable reward is redeemed once, never twice
    """
    redemption = {"id": "ur-1", "user_id": "user-1", "reward_id": "reward-1", "redeemed": True}
    backend.on("GET", "/auth/v1/user", json=auth_user_json())
    backend.on("GET", "/rest/v1/user_engagement", json=[{"user_id": "user-1", "total_points": 1200}])
    backend.on("GET", "/rest/v1/rewards", json=[reward_row(), reward_row(id="reward-2", points_required=5000)])
    backend.on("GET", "/rest/v1/user_rewards", json=[])
    backend.on("GET", "/rest/v1/user_rewards", json=[])
    backend.on("GET", "/rest/v1/user_rewards", json=[redemption])
    backend.on("POST", "/rest/v1/user_rewards", json=[redemption], status_code=201)

    status = client.get("/v1/ownership", headers=BEARER).json()
    assert status["tier"] == "silver"
    assert status["points_to_next_tier"] == 3800

    redeemed = client.post("/v1/ownership/rewards/reward-1/redeem", headers=BEARER)
    assert redeemed.status_code == 200
    assert redeemed.json()["points"] == 1200, "Redeeming never deducts points"

    again = client.post("/v1/ownership/rewards/reward-1/redeem", headers=BEARER)
    assert again.status_code == 422
    assert len(backend.calls("POST", "/rest/v1/user_rewards")) == 1
