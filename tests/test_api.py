# tests/test_api.py
import asyncio
import unittest
from datetime import date
from pathlib import Path
from unittest.mock import patch

import httpx
from sqlalchemy.exc import SQLAlchemyError

from gameledger.core.config import settings
from gameledger.core.database import AsyncSessionLocal
from gameledger.crud.badge import seed_badges
from gameledger.main import app

from db_case import DatabaseTestCase

PASSWORD = "correct-horse-battery"


class ApiTestCase(DatabaseTestCase):
    """Drives the ASGI app directly; startup hooks do not run, so setup seeds badges."""

    async def asyncSetUp(self):
        await super().asyncSetUp()
        async with AsyncSessionLocal() as session:
            await seed_badges(session)
        self.client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")

    async def asyncTearDown(self):
        await self.client.aclose()
        await super().asyncTearDown()

    async def register(self, email="player@example.com", **extra):
        resp = await self.client.post("/api/v1/auth/register", json={"email": email, "password": PASSWORD, **extra})
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    async def login(self, email="player@example.com"):
        resp = await self.client.post(
            "/api/v1/auth/jwt/login",
            data={"username": email, "password": PASSWORD},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    async def signed_up(self, email="player@example.com", **extra):
        await self.register(email, **extra)
        return await self.login(email)

    async def category_id(self, headers, name):
        resp = await self.client.get("/api/v1/categories", headers=headers)
        return next(c["id"] for c in resp.json() if c["name"] == name)

    async def add_transaction(self, headers, amount, type="expense", category_id=None, description=None, day=None):
        payload = {
            "amount": amount,
            "type": type,
            "date": (day or date.today()).isoformat(),
            "category_id": category_id,
            "description": description,
        }
        resp = await self.client.post("/api/v1/transactions", json=payload, headers=headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()


class TestAuthentication(ApiTestCase):
    async def test_register_creates_profile_and_default_categories(self):
        headers = await self.signed_up(full_name="Jamie Doe", username="jamie")

        profile = (await self.client.get("/api/v1/profile/me", headers=headers)).json()
        self.assertEqual(profile["email"], "player@example.com")
        self.assertEqual(profile["username"], "jamie")
        self.assertEqual(profile["full_name"], "Jamie Doe")
        self.assertEqual(profile["level"], 1)
        self.assertEqual(profile["coins"], 0)

        categories = (await self.client.get("/api/v1/categories", headers=headers)).json()
        self.assertEqual(len(categories), 10)
        self.assertTrue(all(c["is_default"] for c in categories))

        income = (await self.client.get("/api/v1/categories", params={"type": "income"}, headers=headers)).json()
        self.assertEqual({c["name"] for c in income}, {"Salary", "Bonus", "Other Income"})

    async def test_requests_without_token_are_rejected(self):
        resp = await self.client.get("/api/v1/profile/me")
        self.assertEqual(resp.status_code, 401)

        resp = await self.client.get("/api/v1/profile/me", headers={"Authorization": "Bearer nonsense"})
        self.assertEqual(resp.status_code, 401)

    async def test_cookie_login_sets_session_cookie(self):
        await self.register()
        resp = await self.client.post(
            "/api/v1/auth/cookie/login",
            data={"username": "player@example.com", "password": PASSWORD},
        )
        self.assertEqual(resp.status_code, 204, resp.text)
        set_cookie = resp.headers["set-cookie"]
        self.assertTrue(set_cookie.startswith("access_token="))
        token = set_cookie.split(";", 1)[0].split("=", 1)[1]

        resp = await self.client.get("/api/v1/profile/me", headers={"Cookie": f"access_token={token}"})
        self.assertEqual(resp.status_code, 200)

        # The route guard now sends auth pages home and lets protected pages through
        resp = await self.client.get("/login", headers={"Cookie": f"access_token={token}"})
        self.assertEqual(resp.status_code, 307)
        self.assertEqual(resp.headers["location"], "/dashboard")

    async def test_route_guard_sends_anonymous_visitors_to_login(self):
        resp = await self.client.get("/dashboard")
        self.assertEqual(resp.status_code, 307)
        self.assertEqual(resp.headers["location"], "/login")

    async def test_logout_without_session_succeeds(self):
        resp = await self.client.post("/api/v1/auth/jwt/logout")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("access_token", resp.headers.get("set-cookie", ""))

    async def test_health(self):
        resp = await self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "healthy")


class TestCategoriesAndTransactions(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.headers = await self.signed_up()

    async def test_duplicate_category_conflicts(self):
        resp = await self.client.post(
            "/api/v1/categories",
            json={"name": "food", "type": "expense", "color": "#000000"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 409)

        # Same name with the other type is a different category
        resp = await self.client.post(
            "/api/v1/categories",
            json={"name": "Food", "type": "income"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 201)

    async def test_default_categories_cannot_be_deleted(self):
        food_id = await self.category_id(self.headers, "Food")
        resp = await self.client.delete(f"/api/v1/categories/{food_id}", headers=self.headers)
        self.assertEqual(resp.status_code, 400)

    async def test_recording_a_transaction_pays_rewards(self):
        food_id = await self.category_id(self.headers, "Food")
        created = await self.add_transaction(self.headers, 12000, category_id=food_id, description="Groceries")

        self.assertEqual(created["transaction"]["exp_gained"], 12)
        self.assertEqual(created["transaction"]["category"]["name"], "Food")
        reward = created["reward"]
        self.assertEqual(reward["exp_gained"], 12)
        self.assertEqual(reward["coins_gained"], 10)
        self.assertEqual(reward["current_streak"], 1)
        self.assertEqual([b["name"] for b in reward["new_badges"]], ["First Step"])
        # First Step pays 50 exp and 10 coins on top
        self.assertEqual(reward["total_exp"], 62)
        self.assertEqual(reward["coins"], 20)

        stats = (await self.client.get("/api/v1/profile/me/stats", headers=self.headers)).json()
        self.assertEqual(stats["transaction_count"], 1)
        self.assertEqual(stats["badges_earned"], 1)
        self.assertEqual(stats["streak_tier"], "starting")

        badges = (await self.client.get("/api/v1/profile/me/badges", headers=self.headers)).json()
        earned = [b["name"] for b in badges if b["earned"]]
        self.assertEqual(earned, ["First Step"])

    async def test_category_type_must_match_entry(self):
        salary_id = await self.category_id(self.headers, "Salary")
        resp = await self.client.post(
            "/api/v1/transactions",
            json={"amount": 1000, "type": "expense", "date": date.today().isoformat(), "category_id": salary_id},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 400)

    async def test_non_positive_amount_is_rejected(self):
        resp = await self.client.post(
            "/api/v1/transactions",
            json={"amount": 0, "type": "expense", "date": date.today().isoformat()},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 422)

    async def test_list_filters_and_pagination(self):
        food_id = await self.category_id(self.headers, "Food")
        await self.add_transaction(self.headers, 5000, category_id=food_id, description="Lunch with team")
        await self.add_transaction(self.headers, 7000, description="Taxi home")
        await self.add_transaction(self.headers, 300000, type="income", description="Salary")

        page = (await self.client.get("/api/v1/transactions", params={"per_page": 2}, headers=self.headers)).json()
        self.assertEqual(page["total"], 3)
        self.assertEqual(page["pages"], 2)
        self.assertEqual(len(page["items"]), 2)

        search = (await self.client.get("/api/v1/transactions", params={"search": "LUNCH"}, headers=self.headers)).json()
        self.assertEqual([t["description"] for t in search["items"]], ["Lunch with team"])

        by_type = (await self.client.get("/api/v1/transactions", params={"type": "income"}, headers=self.headers)).json()
        self.assertEqual(by_type["total"], 1)

        by_category = (await self.client.get(
            "/api/v1/transactions", params={"category_id": food_id}, headers=self.headers
        )).json()
        self.assertEqual(by_category["total"], 1)

        resp = await self.client.get("/api/v1/transactions", params={"month": "2025-13"}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)

    async def test_update_and_delete_transaction(self):
        created = await self.add_transaction(self.headers, 5000)
        tx_id = created["transaction"]["id"]
        self.assertEqual(created["transaction"]["exp_gained"], 5)

        resp = await self.client.patch(
            f"/api/v1/transactions/{tx_id}", json={"amount": 8000, "description": "Dinner"}, headers=self.headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["amount"], 8000)
        self.assertEqual(resp.json()["description"], "Dinner")
        self.assertEqual(resp.json()["exp_gained"], 8)

        resp = await self.client.patch(f"/api/v1/transactions/{tx_id}", json={"amount": 50000}, headers=self.headers)
        self.assertEqual(resp.json()["exp_gained"], 50)

        # Editing other fields keeps the exp already earned
        resp = await self.client.patch(f"/api/v1/transactions/{tx_id}", json={"description": "Late dinner"}, headers=self.headers)
        self.assertEqual(resp.json()["exp_gained"], 50)

        resp = await self.client.delete(f"/api/v1/transactions/{tx_id}", headers=self.headers)
        self.assertEqual(resp.status_code, 204)
        resp = await self.client.get(f"/api/v1/transactions/{tx_id}", headers=self.headers)
        self.assertEqual(resp.status_code, 404)

    async def test_required_fields_cannot_be_cleared(self):
        created = await self.add_transaction(self.headers, 5000, description="Lunch")
        tx_id = created["transaction"]["id"]

        for field in ("amount", "type", "date"):
            resp = await self.client.patch(f"/api/v1/transactions/{tx_id}", json={field: None}, headers=self.headers)
            self.assertEqual(resp.status_code, 422, field)
            self.assertEqual(resp.json()["detail"][0]["loc"][-1], field)

        # Clearing an optional column is still allowed
        resp = await self.client.patch(f"/api/v1/transactions/{tx_id}", json={"description": None}, headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["description"])

        tx = (await self.client.get(f"/api/v1/transactions/{tx_id}", headers=self.headers)).json()
        self.assertEqual(tx["amount"], 5000)
        self.assertEqual(tx["type"], "expense")

    async def test_deleted_transaction_is_gone(self):
        created = await self.add_transaction(self.headers, 5000)
        tx_id = created["transaction"]["id"]
        resp = await self.client.delete(f"/api/v1/transactions/{tx_id}", headers=self.headers)
        self.assertEqual(resp.status_code, 204)
        resp = await self.client.get(f"/api/v1/transactions/{tx_id}", headers=self.headers)
        self.assertEqual(resp.status_code, 404)

    async def test_transactions_are_private(self):
        created = await self.add_transaction(self.headers, 5000)
        other = await self.signed_up("other@example.com")
        resp = await self.client.get(f"/api/v1/transactions/{created['transaction']['id']}", headers=other)
        self.assertEqual(resp.status_code, 404)


class TestBudgetsAndDashboard(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.headers = await self.signed_up()

    async def test_budget_settings_and_alerts(self):
        food_id = await self.category_id(self.headers, "Food")
        resp = await self.client.put(
            "/api/v1/budgets/settings",
            json={
                "monthly_budget": 2_000_000,
                "saving_goal": 500_000,
                "category_budgets": [{"category_id": food_id, "amount": 100_000}],
            },
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["monthly_budget"], 2_000_000)
        self.assertEqual(len(resp.json()["category_budgets"]), 1)

        await self.add_transaction(self.headers, 1_600_000)
        await self.add_transaction(self.headers, 60_000, category_id=food_id)

        alerts = (await self.client.get("/api/v1/alerts", headers=self.headers)).json()
        total = sorted(a["percentage"] for a in alerts if a["alert_type"] == "total")
        category = [a for a in alerts if a["alert_type"] == "category"]
        self.assertEqual(total, [50, 80])
        self.assertEqual([a["percentage"] for a in category], [50])
        self.assertEqual(category[0]["category_name"], "Food")

        check = (await self.client.post("/api/v1/alerts/check", headers=self.headers)).json()
        self.assertEqual(check["created"], [])
        self.assertEqual(len(check["unread"]), 3)

        resp = await self.client.post(f"/api/v1/alerts/{alerts[0]['id']}/read", headers=self.headers)
        self.assertTrue(resp.json()["is_read"])
        resp = await self.client.post("/api/v1/alerts/read-all", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual((await self.client.get("/api/v1/alerts", headers=self.headers)).json(), [])

        progress = (await self.client.get("/api/v1/budgets/categories/progress", headers=self.headers)).json()
        self.assertEqual(progress["items"][0]["spent"], 60_000)
        self.assertEqual(progress["items"][0]["percentage"], 60.0)

    async def test_budgets_only_on_expense_categories(self):
        salary_id = await self.category_id(self.headers, "Salary")
        resp = await self.client.put(
            "/api/v1/budgets/settings",
            json={"category_budgets": [{"category_id": salary_id, "amount": 100}]},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 400)

    async def test_dashboard_summary(self):
        await self.client.put("/api/v1/budgets/settings", json={"monthly_budget": 100_000}, headers=self.headers)
        food_id = await self.category_id(self.headers, "Food")
        await self.add_transaction(self.headers, 300_000, type="income")
        await self.add_transaction(self.headers, 40_000, category_id=food_id)
        await self.add_transaction(self.headers, 10_000)

        resp = await self.client.get("/api/v1/dashboard/summary", headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()

        self.assertEqual(data["summary"]["total_income"], 300_000)
        self.assertEqual(data["summary"]["total_expense"], 50_000)
        self.assertEqual(data["summary"]["net_amount"], 250_000)
        self.assertEqual(data["summary"]["transaction_count"], 3)
        self.assertEqual([c["name"] for c in data["category_expenses"]], ["Food"])
        self.assertEqual(data["budget_progress"]["budget_usage"], 50.0)
        self.assertEqual(data["budget_progress"]["budget_status"], "good")
        self.assertEqual(data["game_stats"]["transaction_count"], 3)
        self.assertEqual(len(data["recent_transactions"]), 3)
        self.assertEqual([a["percentage"] for a in data["alerts"]], [50])

    async def test_trends(self):
        await self.add_transaction(self.headers, 20_000)
        resp = await self.client.get("/api/v1/trends", headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        self.assertEqual(data["year"], date.today().year)
        self.assertEqual(len(data["monthly"]), 12)
        self.assertEqual(data["monthly"][date.today().month - 1]["expense"], 20_000)
        self.assertEqual(data["categories"][0]["name"], "Uncategorized")
        self.assertEqual(len(data["patterns"]["day_of_week"]), 7)


class TestOnboardingFlow(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.headers = await self.signed_up()

    async def post(self, path, **kwargs):
        return await self.client.post(f"/api/v1/onboarding{path}", headers=self.headers, **kwargs)

    async def test_new_account_walks_the_wizard(self):
        state = (await self.client.get("/api/v1/onboarding", headers=self.headers)).json()
        self.assertTrue(state["active"])
        self.assertEqual(state["step"], 1)
        self.assertEqual(state["step_name"], "welcome")

        state = (await self.post("/next")).json()
        self.assertEqual(state["step_name"], "goal")

        state = (await self.post("/goal", json={"monthly_budget": 1_500_000, "saving_goal": 300_000})).json()
        self.assertEqual(state["step_name"], "category")

        step = (await self.client.get("/api/v1/onboarding/categories", headers=self.headers)).json()
        self.assertEqual(len(step["categories"]), 10)
        self.assertFalse(any(r["already_added"] for r in step["recommended"]))

        resp = await self.post("/categories/cafe")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["name"], "Cafe")
        self.assertEqual((await self.post("/categories/Cafe")).status_code, 409)
        self.assertEqual((await self.post("/categories/Yachts")).status_code, 404)

        state = (await self.post("/next")).json()
        self.assertEqual(state["step_name"], "first_transaction")

        resp = await self.post(
            "/first-transaction",
            json={"amount": 4000, "type": "expense", "date": date.today().isoformat()},
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["reward"]["exp_gained"], 5)

        state = (await self.client.get("/api/v1/onboarding", headers=self.headers)).json()
        self.assertEqual(state["step_name"], "gamification")

        done = (await self.post("/complete")).json()
        self.assertTrue(done["state"]["completed"])
        self.assertFalse(done["state"]["active"])
        self.assertEqual(done["coins_awarded"], 100)
        self.assertEqual(done["exp_awarded"], 200)

        self.assertEqual((await self.post("/complete")).status_code, 409)
        self.assertEqual((await self.post("/skip")).status_code, 409)

        profile = (await self.client.get("/api/v1/profile/me", headers=self.headers)).json()
        self.assertEqual(profile["monthly_budget"], 1_500_000)
        self.assertTrue(profile["onboarding_completed"])

    async def test_moving_without_wizard_conflicts(self):
        resp = await self.post("/prev")
        self.assertEqual(resp.status_code, 409)

    async def test_skip(self):
        await self.post("/start")
        state = (await self.post("/skip")).json()
        self.assertTrue(state["skipped"])
        self.assertTrue(state["completed"])

        profile = (await self.client.get("/api/v1/profile/me", headers=self.headers)).json()
        self.assertEqual(profile["coins"], 0)


class TestProfile(ApiTestCase):
    async def test_username_conflict(self):
        await self.register("first@example.com", username="taken_name")
        headers = await self.signed_up("second@example.com")

        resp = await self.client.patch("/api/v1/profile/me", json={"username": "taken_name"}, headers=headers)
        self.assertEqual(resp.status_code, 409)

        resp = await self.client.patch("/api/v1/profile/me", json={"username": "bad name!"}, headers=headers)
        self.assertEqual(resp.status_code, 422)

        resp = await self.client.patch(
            "/api/v1/profile/me", json={"username": "fresh_name", "full_name": "  Sam  "}, headers=headers
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["username"], "fresh_name")
        self.assertEqual(resp.json()["full_name"], "Sam")

    async def test_avatar_upload_and_removal(self):
        headers = await self.signed_up()
        resp = await self.client.post(
            "/api/v1/profile/me/avatar",
            files={"file": ("me.png", b"\x89PNG\r\n\x1a\n" + b"\x00" * 16, "image/png")},
            headers=headers,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertTrue(resp.json()["avatar_url"].startswith("/media/avatars/"))

        resp = await self.client.post(
            "/api/v1/profile/me/avatar",
            files={"file": ("me.txt", b"hello", "text/plain")},
            headers=headers,
        )
        self.assertEqual(resp.status_code, 400)

        resp = await self.client.delete("/api/v1/profile/me/avatar", headers=headers)
        self.assertIsNone(resp.json()["avatar_url"])

    def avatar_path(self, url):
        return Path(settings.MEDIA_ROOT) / "avatars" / url.rsplit("/", 1)[-1]

    async def upload_png(self, headers):
        return await self.client.post(
            "/api/v1/profile/me/avatar",
            files={"file": ("me.png", b"\x89PNG\r\n\x1a\n" + b"\x00" * 16, "image/png")},
            headers=headers,
        )

    async def test_new_avatar_replaces_file_after_save(self):
        headers = await self.signed_up()
        first = (await self.upload_png(headers)).json()["avatar_url"]
        self.assertTrue(self.avatar_path(first).exists())

        # Distinct millisecond stamp for the second file name
        await asyncio.sleep(0.01)
        second = (await self.upload_png(headers)).json()["avatar_url"]
        self.assertNotEqual(first, second)
        self.assertFalse(self.avatar_path(first).exists())
        self.assertTrue(self.avatar_path(second).exists())

        await self.client.delete("/api/v1/profile/me/avatar", headers=headers)
        self.assertFalse(self.avatar_path(second).exists())

    async def test_failed_avatar_save_keeps_old_file(self):
        headers = await self.signed_up()
        first = (await self.upload_png(headers)).json()["avatar_url"]
        avatars = Path(settings.MEDIA_ROOT) / "avatars"
        before = set(avatars.iterdir())

        await asyncio.sleep(0.01)
        with patch("gameledger.api.v1.routes.profile.save_profile", side_effect=SQLAlchemyError("write failed")):
            resp = await self.upload_png(headers)
        self.assertEqual(resp.status_code, 500)

        self.assertTrue(self.avatar_path(first).exists())
        self.assertEqual(set(avatars.iterdir()), before)
        profile = (await self.client.get("/api/v1/profile/me", headers=headers)).json()
        self.assertEqual(profile["avatar_url"], first)

    async def test_delete_account_removes_everything(self):
        headers = await self.signed_up()
        await self.add_transaction(headers, 5000)

        resp = await self.client.delete("/api/v1/profile/me", headers=headers)
        self.assertEqual(resp.status_code, 204, resp.text)

        resp = await self.client.get("/api/v1/profile/me", headers=headers)
        self.assertEqual(resp.status_code, 401)

        resp = await self.client.post(
            "/api/v1/auth/jwt/login",
            data={"username": "player@example.com", "password": PASSWORD},
        )
        self.assertEqual(resp.status_code, 400)


if __name__ == "__main__":
    unittest.main()
