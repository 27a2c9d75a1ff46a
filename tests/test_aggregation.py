import asyncio
import threading

import pytest

from playstore_api.catalog.aggregation import aggregate_details

SUMMARIES = [
    {"appId": "a.one", "title": "One"},
    {"appId": "b.two", "title": "Two"},
    {"appId": "c.three", "title": "Three"},
    {"appId": "d.four", "title": "Four"},
    {"appId": "e.five", "title": "Five"},
]


def _detail(opts):
    return {"appId": opts["appId"], "description": f"Full {opts['appId']}", "lang": opts["lang"]}


@pytest.fixture
def developer(provider):
    provider.responses["developer"] = SUMMARIES
    provider.responses["app"] = _detail
    provider.failing_apps = {"b.two", "d.four"}
    return provider


class TestOnlyReadableDetails:
    URL = "/api/developers_only_readable_details/Acme%20Apps/"

    def test_failed_lookups_are_dropped(self, client, developer):
        response = client.get(self.URL)
        body = response.json()
        assert response.status_code == 200
        assert body["devId"] == "Acme Apps"
        assert body["failed"] == 2
        assert [app["appId"] for app in body["apps"]] == ["a.one", "c.three", "e.five"]
        assert all(app["description"].startswith("Full") for app in body["apps"])

    def test_summary_requested_without_details(self, client, developer):
        client.get(self.URL, params={"num": "5", "fullDetail": "true"})
        assert developer.calls_to("developer") == [
            {"num": "5", "fullDetail": False, "devId": "Acme Apps"}
        ]

    def test_locale_defaults_reach_every_lookup(self, client, developer):
        client.get(self.URL)
        lookups = developer.calls_to("app")
        assert len(lookups) == 5
        assert {(o["lang"], o["country"]) for o in lookups} == {("en", "us")}
        assert sorted(o["appId"] for o in lookups) == sorted(s["appId"] for s in SUMMARIES)

    def test_locale_from_query(self, client, developer):
        client.get(self.URL, params={"lang": "fr", "country": "ca"})
        lookups = developer.calls_to("app")
        assert {(o["lang"], o["country"]) for o in lookups} == {("fr", "ca")}
        assert set(lookups[0]) == {"appId", "lang", "country"}

    def test_no_apps(self, client, provider):
        provider.responses["developer"] = []
        assert client.get(self.URL).json() == {"devId": "Acme Apps", "apps": [], "failed": 0}
        assert provider.calls_to("app") == []

    def test_non_list_summary(self, client, provider):
        provider.responses["developer"] = {"error": "unexpected"}
        assert client.get(self.URL).json() == {"devId": "Acme Apps", "apps": [], "failed": 0}

    def test_summary_failure_is_400(self, client, provider):
        provider.errors["developer"] = RuntimeError("Developer not found")
        response = client.get(self.URL)
        assert response.status_code == 400
        assert response.json() == {"message": "Developer not found"}


class TestBestEffortDetails:
    URL = "/api/developers_best_effort_details/Acme%20Apps/"

    def test_failed_lookups_fall_back_to_summary(self, client, developer):
        body = client.get(self.URL).json()
        assert body["devId"] == "Acme Apps"
        assert body["fallbacks"] == 2
        assert len(body["apps"]) == 5
        assert [app["appId"] for app in body["apps"]] == [s["appId"] for s in SUMMARIES]
        assert body["apps"][1] == SUMMARIES[1]
        assert body["apps"][3] == SUMMARIES[3]
        assert body["apps"][0]["description"] == "Full a.one"

    def test_all_succeed(self, client, developer):
        developer.failing_apps = set()
        body = client.get(self.URL).json()
        assert body["fallbacks"] == 0
        assert all("description" in app for app in body["apps"])

    def test_no_apps(self, client, provider):
        provider.responses["developer"] = []
        assert client.get(self.URL).json() == {"devId": "Acme Apps", "apps": [], "fallbacks": 0}


def test_summary_without_app_id_counts_as_failure(developer):
    summaries = [{"appId": "a.one"}, {"title": "no id"}]
    apps, misses = asyncio.run(aggregate_details(developer, summaries, "en", "us", "fallback"))
    assert misses == 1
    assert apps[1] == {"title": "no id"}


def test_lookups_run_concurrently(provider):
    barrier = threading.Barrier(len(SUMMARIES), timeout=5)

    def detail(opts):
        barrier.wait()
        return _detail(opts)

    provider.responses["app"] = detail
    apps, misses = asyncio.run(aggregate_details(provider, SUMMARIES, "en", "us", "drop"))
    assert misses == 0
    assert [app["appId"] for app in apps] == [s["appId"] for s in SUMMARIES]


def test_wide_fan_out_is_not_capped(provider):
    summaries = [{"appId": f"app.{i}"} for i in range(60)]
    barrier = threading.Barrier(len(summaries), timeout=10)
    running = []
    peak = []
    lock = threading.Lock()

    def detail(opts):
        with lock:
            running.append(opts["appId"])
            peak.append(len(running))
        barrier.wait()
        with lock:
            running.remove(opts["appId"])
        return {"appId": opts["appId"]}

    provider.responses["app"] = detail
    apps, misses = asyncio.run(aggregate_details(provider, summaries, "en", "us", "drop"))
    assert misses == 0
    assert max(peak) == 60
    assert [app["appId"] for app in apps] == [s["appId"] for s in summaries]


class TestNonDictSummaries:
    def test_best_effort_keeps_them(self, client, provider):
        provider.responses["developer"] = ["com.a", "com.b"]
        response = client.get("/api/developers_best_effort_details/X/")
        assert response.status_code == 200
        assert response.json() == {"devId": "X", "apps": ["com.a", "com.b"], "fallbacks": 2}
        assert provider.calls_to("app") == []

    def test_readable_drops_them(self, client, provider):
        provider.responses["developer"] = ["com.a", "com.b"]
        response = client.get("/api/developers_only_readable_details/X/")
        assert response.status_code == 200
        assert response.json() == {"devId": "X", "apps": [], "failed": 2}
