"""Integration tests for the service layer: gateway calls, state mutation and failure handling"""

import json
from decimal import Decimal

import pytest
from prometheus_client import REGISTRY

from factories import account_row, article_row, goal_row, profile_row, reward_row, session_json
from outbehaving.domain.models import MembershipTier
from outbehaving.infrastructure.clients.auth import AuthClient
from outbehaving.infrastructure.errors import USER_MESSAGES, ErrorType
from outbehaving.services.auth import AuthService
from outbehaving.services.goals import GoalsService
from outbehaving.services.news import NewsService
from outbehaving.services.ownership import OwnershipService
from outbehaving.services.profile import ProfileService


def payments(outcome: str) -> float:
    return REGISTRY.get_sample_value("outbehaving_goal_payments_total", {"outcome": outcome}) or 0.0


def body_of(request) -> dict:
    return json.loads(request.content)


class TestGoalsService:
    @pytest.fixture
    def service(self, app_state, db):
        return GoalsService(app_state, db, "user-1")

    async def test_load_goals(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row(), goal_row(id="bad", target_amount=-1)])

        goals = await service.load_goals()

        assert [g.id for g in goals] == ["goal-1"]
        assert goals[0].progress_percentage == 25.0
        assert goals[0].days_remaining == 60
        assert service.state.goals.is_loading is False
        assert backend.requests[0].url.params["order"] == "created_at.desc"

    async def test_load_goals_failure_sets_error(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json={"message": "forbidden"}, status_code=403)

        assert await service.load_goals() is None
        assert service.state.goals.error == USER_MESSAGES[ErrorType.AUTHORIZATION]
        assert service.state.goals.error_type == ErrorType.AUTHORIZATION
        assert service.state.notifications.notifications[-1].type == "error"

    async def test_create_goal(self, service, backend):
        backend.on("POST", "/rest/v1/goals", json=[goal_row(saved_amount=0)], status_code=201)

        created = await service.create_goal(
            {"name": "Holiday fund", "target_amount": "1000", "frequency": "monthly", "linked_account_id": "acc-1"}
        )

        assert created.progress_percentage == 0.0
        assert service.state.goals.get_goal("goal-1") is created
        sent = body_of(backend.requests[0])
        assert sent["user_id"] == "user-1"
        assert sent["saved_amount"] == "0"
        assert sent["frequency"] == "monthly"

    async def test_create_goal_invalid_form_makes_no_call(self, service, backend):
        assert await service.create_goal({"name": "x", "target_amount": "0", "frequency": "monthly"}) is None

        assert backend.requests == []
        assert service.state.goals.error_type == ErrorType.VALIDATION

    async def test_update_goal_merges_backend_record(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        backend.on("PATCH", "/rest/v1/goals", json=[goal_row(saved_amount=500)])
        await service.load_goals()
        service.state.goals.set_selected_goal("goal-1")

        updated = await service.update_goal("goal-1", {"saved_amount": "500"})

        assert updated.progress_percentage == 50.0
        assert service.state.goals.selected_goal.progress_percentage == 50.0
        assert body_of(backend.calls("PATCH", "/rest/v1/goals")[0]) == {"saved_amount": "500"}

    async def test_update_goal_cannot_clear_required_field(self, service, backend):
        assert await service.update_goal("goal-1", {"target_amount": None}) is None

        assert backend.requests == []
        assert service.state.goals.error_type == ErrorType.VALIDATION

    async def test_delete_goal(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        backend.on("DELETE", "/rest/v1/goals", status_code=204)
        await service.load_goals()

        assert await service.delete_goal("goal-1") is True
        assert service.state.goals.goals == []

    async def test_payment_applied(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        backend.on("GET", "/rest/v1/accounts", json=[account_row()])
        backend.on("PATCH", "/rest/v1/accounts", json=[account_row(balance=400)])
        backend.on("PATCH", "/rest/v1/goals", json=[goal_row(saved_amount=350)])
        before = payments("applied")

        goal = await service.make_payment("goal-1", Decimal("100"))

        assert goal.progress_percentage == 35.0
        assert service.state.user.get_account("acc-1").balance == Decimal("400")
        assert body_of(backend.calls("PATCH", "/rest/v1/accounts")[0]) == {"balance": "400"}
        assert body_of(backend.calls("PATCH", "/rest/v1/goals")[0]) == {"saved_amount": "350"}
        assert payments("applied") - before == 1

    async def test_payment_refused_for_insufficient_balance(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        backend.on("GET", "/rest/v1/accounts", json=[account_row(balance=50)])
        before = payments("refused")

        assert await service.make_payment("goal-1", "100") is None

        assert backend.calls("PATCH", "/rest/v1/accounts") == []
        assert backend.calls("PATCH", "/rest/v1/goals") == []
        assert service.state.goals.error == "Insufficient account balance"
        assert service.state.goals.error_type == ErrorType.VALIDATION
        assert payments("refused") - before == 1

    async def test_payment_refused_without_linked_account(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row(linked_account_id=None)])

        assert await service.make_payment("goal-1", "10") is None
        assert service.state.goals.error == "Link an account to this goal first"
        assert backend.calls("GET", "/rest/v1/accounts") == []

    async def test_payment_invalid_amount(self, service, backend):
        assert await service.make_payment("goal-1", "0") is None

        assert backend.requests == []
        assert service.state.goals.error_type == ErrorType.VALIDATION

    async def test_debit_failure_writes_nothing_else(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        backend.on("GET", "/rest/v1/accounts", json=[account_row()])
        backend.on("PATCH", "/rest/v1/accounts", json={"message": "down"}, status_code=500)
        before = payments("failed")

        assert await service.make_payment("goal-1", "100") is None

        assert backend.calls("PATCH", "/rest/v1/goals") == []
        assert service.state.goals.error_type == ErrorType.SERVER
        assert payments("failed") - before == 1

    async def test_credit_failure_restores_balance(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        backend.on("GET", "/rest/v1/accounts", json=[account_row()])
        backend.on("PATCH", "/rest/v1/accounts", json=[account_row(balance=400)])
        backend.on("PATCH", "/rest/v1/accounts", json=[account_row(balance=500)])
        backend.on("PATCH", "/rest/v1/goals", json={"message": "down"}, status_code=503)
        before = payments("rolled_back")

        assert await service.make_payment("goal-1", "100") is None

        debit, restore = backend.calls("PATCH", "/rest/v1/accounts")
        assert body_of(debit) == {"balance": "400"}
        assert body_of(restore) == {"balance": "500"}
        assert service.state.user.get_account("acc-1").balance == Decimal("500")
        assert service.state.goals.error == USER_MESSAGES[ErrorType.SERVER]
        assert payments("rolled_back") - before == 1

    async def test_empty_credit_reply_restores_balance(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        backend.on("GET", "/rest/v1/accounts", json=[account_row()])
        backend.on("PATCH", "/rest/v1/accounts", json=[account_row(balance=400)])
        backend.on("PATCH", "/rest/v1/accounts", json=[account_row(balance=500)])
        backend.on("PATCH", "/rest/v1/goals", status_code=204)
        before = payments("rolled_back")

        assert await service.make_payment("goal-1", "100") is None

        debit, restore = backend.calls("PATCH", "/rest/v1/accounts")
        assert body_of(debit) == {"balance": "400"}
        assert body_of(restore) == {"balance": "500"}
        assert service.state.user.get_account("acc-1").balance == Decimal("500")
        assert service.state.goals.error_type == ErrorType.SERVER
        assert payments("rolled_back") - before == 1

    async def test_empty_debit_reply_restores_balance(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        backend.on("GET", "/rest/v1/accounts", json=[account_row()])
        backend.on("PATCH", "/rest/v1/accounts", status_code=204)
        backend.on("PATCH", "/rest/v1/accounts", json=[account_row(balance=500)])
        before = payments("rolled_back")

        assert await service.make_payment("goal-1", "100") is None

        assert [body_of(r) for r in backend.calls("PATCH", "/rest/v1/accounts")] == [
            {"balance": "400"},
            {"balance": "500"},
        ]
        assert backend.calls("PATCH", "/rest/v1/goals") == []
        assert service.state.goals.error_type == ErrorType.SERVER
        assert payments("rolled_back") - before == 1

    async def test_failed_rollback_is_inconsistent(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        backend.on("GET", "/rest/v1/accounts", json=[account_row()])
        backend.on("PATCH", "/rest/v1/accounts", json=[account_row(balance=400)])
        backend.on("PATCH", "/rest/v1/accounts", json={"message": "down"}, status_code=503)
        backend.on("PATCH", "/rest/v1/goals", json={"message": "down"}, status_code=503)
        before = payments("inconsistent")

        assert await service.make_payment("goal-1", "100") is None

        assert len(backend.calls("PATCH", "/rest/v1/accounts")) == 2
        assert service.state.goals.error_type == ErrorType.SERVER
        assert payments("inconsistent") - before == 1

    async def test_payment_uses_loaded_state(self, service, backend):
        backend.on("GET", "/rest/v1/goals", json=[goal_row()])
        await service.load_goals()
        service.state.user.set_accounts([])
        backend.on("GET", "/rest/v1/accounts", json=[account_row()])
        backend.on("PATCH", "/rest/v1/accounts", json=[account_row(balance=490)])
        backend.on("PATCH", "/rest/v1/goals", json=[goal_row(saved_amount=260)])

        goal = await service.make_payment("goal-1", "10")

        assert goal.progress_percentage == 26.0
        # The goal came from state; only the account had to be fetched
        assert len(backend.calls("GET", "/rest/v1/goals")) == 1


class TestOwnershipService:
    @pytest.fixture
    def service(self, app_state, db):
        return OwnershipService(app_state, db, "user-1")

    @pytest.fixture
    def loyalty_backend(self, backend):
        backend.on("GET", "/rest/v1/user_engagement", json=[{"user_id": "user-1", "total_points": 1200}])
        backend.on("GET", "/rest/v1/rewards", json=[reward_row(), reward_row(id="reward-2", points_required=2000)])
        return backend

    async def test_load_engagement_data(self, service, loyalty_backend):
        loyalty_backend.on("GET", "/rest/v1/user_rewards", json=[])

        membership = await service.load_engagement_data()

        assert membership.tier == MembershipTier.SILVER
        assert membership.points == 1200
        assert [r.can_redeem for r in service.state.ownership.available_rewards] == [True, False]

    async def test_load_failure(self, service, backend):
        backend.on("GET", "/rest/v1/user_engagement", json={"message": "boom"}, status_code=500)
        backend.on("GET", "/rest/v1/rewards", json=[])
        backend.on("GET", "/rest/v1/user_rewards", json=[])

        assert await service.load_engagement_data() is None
        assert service.state.ownership.error_type == ErrorType.SERVER

    async def test_redeem_reward(self, service, loyalty_backend):
        redemption = {"id": "ur-1", "user_id": "user-1", "reward_id": "reward-1", "redeemed": True}
        loyalty_backend.on("GET", "/rest/v1/user_rewards", json=[])
        loyalty_backend.on("GET", "/rest/v1/user_rewards", json=[redemption])
        loyalty_backend.on("POST", "/rest/v1/user_rewards", json=[redemption], status_code=201)
        before = REGISTRY.get_sample_value("outbehaving_rewards_redeemed_total") or 0.0
        await service.load_engagement_data()

        assert await service.redeem_reward("reward-1") is True

        status = service.state.ownership.find_reward("reward-1")
        assert status.is_redeemed is True
        assert status.can_redeem is False
        assert service.state.ownership.current_points == 1200
        sent = body_of(loyalty_backend.calls("POST", "/rest/v1/user_rewards")[0])
        assert sent["reward_id"] == "reward-1"
        assert sent["redeemed"] is True
        assert "redeemed_at" in sent
        assert REGISTRY.get_sample_value("outbehaving_rewards_redeemed_total") - before == 1

    async def test_redeem_unaffordable_reward(self, service, loyalty_backend):
        loyalty_backend.on("GET", "/rest/v1/user_rewards", json=[])
        await service.load_engagement_data()

        assert await service.redeem_reward("reward-2") is False

        assert loyalty_backend.calls("POST", "/rest/v1/user_rewards") == []
        assert service.state.ownership.error == "Insufficient points or reward not found"

    async def test_redeem_twice_is_refused(self, service, loyalty_backend):
        loyalty_backend.on(
            "GET",
            "/rest/v1/user_rewards",
            json=[{"id": "ur-1", "user_id": "user-1", "reward_id": "reward-1", "redeemed": True}],
        )
        await service.load_engagement_data()

        assert await service.redeem_reward("reward-1") is False
        assert loyalty_backend.calls("POST", "/rest/v1/user_rewards") == []


class TestNewsService:
    @pytest.fixture
    def service(self, app_state, db):
        return NewsService(app_state, db, "user-1")

    async def test_toggle_favourite_marks_read(self, service, backend):
        backend.on("GET", "/rest/v1/articles", json=[article_row(), article_row(id="art-2")])
        backend.on("POST", "/rest/v1/user_article_reads", json=[{"id": "read-1"}], status_code=201)
        await service.load_articles()

        assert await service.toggle_favourite("art-2") is True

        assert body_of(backend.calls("POST", "/rest/v1/user_article_reads")[0]) == {
            "user_id": "user-1",
            "article_id": "art-2",
        }
        assert [card.is_favourite for card in service.articles()] == [False, True]

    async def test_failed_read_tracking_keeps_favourite(self, service, backend):
        backend.on("POST", "/rest/v1/user_article_reads", json={"message": "down"}, status_code=500)

        assert await service.toggle_favourite("art-1") is True

        assert "art-1" in service.state.news.favourite_ids
        assert service.state.news.error is None
        assert service.state.notifications.notifications[-1].type == "error"

    async def test_mark_read_needs_a_user(self, app_state, db, backend):
        assert await NewsService(app_state, db).mark_article_read("art-1") is False
        assert backend.requests == []


class TestProfileService:
    @pytest.fixture
    def service(self, app_state, db, storage):
        return ProfileService(app_state, db, storage, "user-1")

    async def test_load_profile_and_accounts(self, service, backend):
        backend.on("GET", "/rest/v1/profiles", json=[profile_row()])
        backend.on("GET", "/rest/v1/accounts", json=[account_row()])

        profile = await service.load_profile()
        accounts = await service.load_accounts()

        assert profile.name == "Jo Bloggs"
        assert [a.id for a in accounts] == ["acc-1"]
        assert service.state.user.profile is profile

    async def test_missing_profile_is_not_found(self, service, backend):
        backend.on("GET", "/rest/v1/profiles", json=[])

        assert await service.load_profile() is None
        assert service.state.user.error_type == ErrorType.NOT_FOUND

    async def test_update_profile_validates_first(self, service, backend):
        assert await service.update_profile({"interests": ["Gardening"]}) is None
        assert backend.requests == []

    async def test_update_profile(self, service, backend):
        backend.on("PATCH", "/rest/v1/profiles", json=[profile_row(address="1 High St")])

        profile = await service.update_profile({"address": "1 High St"})

        assert profile.address == "1 High St"
        sent = body_of(backend.requests[0])
        assert sent["address"] == "1 High St"
        assert "updated_at" in sent

    async def test_upload_avatar(self, service, backend):
        url = "https://backend.test/storage/v1/object/public/avatars/user-1/me.png"
        backend.on("POST", "/storage/v1/object/avatars/user-1/me.png", json={"Key": "avatars/user-1/me.png"})
        backend.on("PATCH", "/rest/v1/profiles", json=[profile_row(avatar_url=url)])

        assert await service.upload_avatar("me.png", b"img", "image/png") == url

        assert body_of(backend.calls("PATCH", "/rest/v1/profiles")[0])["avatar_url"] == url
        assert service.state.user.profile.avatar_url == url


class TestAuthService:
    @pytest.fixture
    def service(self, app_state, backend_config):
        return AuthService(app_state, AuthClient(backend_config))

    async def test_initialize_without_session(self, service, backend):
        assert await service.initialize() is None

        assert service.state.auth.is_loading is False
        assert service.state.auth.is_authenticated is False
        assert backend.requests == []

    async def test_sign_in(self, service, backend):
        backend.on("POST", "/auth/v1/token", json=session_json())
        await service.initialize()

        session = await service.sign_in({"email": "Jo@Example.com", "password": "secret1"})

        assert session.access_token == "user-token"
        assert service.state.auth.is_authenticated is True
        assert body_of(backend.requests[0])["email"] == "jo@example.com"

    async def test_sign_in_invalid_form(self, service, backend):
        assert await service.sign_in({"email": "nope", "password": "1"}) is None

        assert backend.requests == []
        assert service.state.auth.error_type == ErrorType.VALIDATION

    async def test_sign_in_rejected(self, service, backend):
        backend.on("POST", "/auth/v1/token", json={"error": "invalid_grant"}, status_code=400)

        assert await service.sign_in({"email": "jo@example.com", "password": "wrong-pass"}) is None
        assert service.state.auth.error == USER_MESSAGES[ErrorType.AUTHENTICATION]

    async def test_sign_out_resets_state(self, service, backend):
        backend.on("POST", "/auth/v1/token", json=session_json())
        backend.on("POST", "/auth/v1/logout", status_code=204)
        await service.initialize()
        await service.sign_in({"email": "jo@example.com", "password": "secret1"})
        service.state.ownership.set_current_points(3000)
        service.state.news.toggle_favourite("art-1")

        assert await service.sign_out() is True

        assert service.state.auth.is_authenticated is False
        assert service.state.news.favourite_ids == set()
        assert service.state.ownership.current_points == 0
        service.close()
        assert service.subscription is None

    async def test_password_flows(self, service, backend):
        backend.on("POST", "/auth/v1/recover", json={})

        assert await service.reset_password("not-an-email") is False
        assert await service.reset_password("jo@example.com") is True
        assert await service.update_password("123") is False
        assert len(backend.requests) == 1
