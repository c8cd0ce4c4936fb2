"""
API integration tests.

Drive the FastAPI app end to end over a SQLite rule store and audit log,
with the completion backend mocked.
"""

import pytest

from beacon.core.exceptions import CompletionError

pytestmark = pytest.mark.integration


def _check(client, headers, **page):
    return client.post("/check-url", json=page, headers=headers)


class TestCheckUrl:
    def test_block_list_match(self, client, seed_rule, auth_headers, audit_rows, fake_completion):
        seed_rule(block_list=["bbc.co.uk"])

        response = _check(client, auth_headers, url="https://www.bbc.co.uk/news", title="BBC News")

        assert response.status_code == 200
        assert response.json() == {"decision": "BLOCK"}
        fake_completion.complete.assert_not_awaited()

        rows = audit_rows()
        assert len(rows) == 1
        assert (rows[0].user_id, rows[0].domain, rows[0].decision, rows[0].reason) == (
            "user-1",
            "bbc.co.uk",
            "BLOCK",
            "block-list",
        )

    def test_infra_allow_is_not_audited(self, client, seed_rule, auth_headers, audit_rows):
        seed_rule(block_list=["google.com"])

        response = _check(client, auth_headers, url="https://accounts.google.com/signin")

        assert response.status_code == 200
        assert response.json() == {"decision": "ALLOW"}
        assert audit_rows() == []

    def test_video_playback_goes_to_ai(
        self, client, seed_rule, auth_headers, audit_rows, fake_completion
    ):
        seed_rule(blocked_categories={"entertainment": True})
        fake_completion.complete.return_value = "BLOCK"

        response = _check(
            client,
            auth_headers,
            url="https://youtube.com/watch?v=1",
            title="Funny cat compilation",
        )

        assert response.json() == {"decision": "BLOCK"}
        prompt = fake_completion.complete.await_args.args[0]
        assert "Entertainment (Streaming, non-educational YouTube)" in prompt
        assert audit_rows()[0].reason == "ai-decision"

    def test_video_browsing_is_allowed(self, client, seed_rule, auth_headers, audit_rows):
        seed_rule(blocked_categories={"entertainment": True})

        response = _check(
            client, auth_headers, url="https://www.youtube.com/results?search_query=lofi"
        )

        assert response.json() == {"decision": "ALLOW"}
        row = audit_rows()[0]
        assert row.reason == "navigation"
        assert row.page_title == "lofi"

    def test_search_page_is_audited_with_query(self, client, seed_rule, auth_headers, audit_rows):
        seed_rule()

        response = _check(
            client, auth_headers, url="https://www.bing.com/search?q=weather", searchQuery="weather"
        )

        assert response.json() == {"decision": "ALLOW"}
        row = audit_rows()[0]
        assert row.reason == "search"
        assert row.page_title == 'Bing Search: "weather"'

    def test_allow_list_skips_ai(self, client, seed_rule, auth_headers, fake_completion):
        seed_rule(allow_list=["github.com"])

        response = _check(client, auth_headers, url="https://gist.github.com/someone")

        assert response.json() == {"decision": "ALLOW"}
        fake_completion.complete.assert_not_awaited()

    def test_ai_failure_blocks(self, client, seed_rule, auth_headers, audit_rows, fake_completion):
        seed_rule()
        fake_completion.complete.side_effect = CompletionError("HTTP 503")

        response = _check(client, auth_headers, url="https://example.com", title="Example")

        assert response.status_code == 200
        assert response.json() == {"decision": "BLOCK"}
        row = audit_rows()[0]
        assert row.decision == "BLOCK"
        assert row.reason == "ai-decision"

    def test_unexpected_ai_error_blocks_with_ai_reason(
        self, client, seed_rule, auth_headers, audit_rows, fake_completion
    ):
        seed_rule()
        fake_completion.complete.side_effect = AttributeError("bad candidate part")

        response = _check(client, auth_headers, url="https://example.com", title="Example")

        assert response.status_code == 200
        assert response.json() == {"decision": "BLOCK"}
        assert audit_rows()[0].reason == "ai-decision"

    def test_camel_case_fields_reach_the_prompt(
        self, client, seed_rule, auth_headers, fake_completion
    ):
        seed_rule()

        _check(
            client,
            auth_headers,
            url="https://example.com/article",
            title="Article",
            bodyText="Some body text",
            searchQuery="unrelated",
            unknownField="ignored",
        )

        prompt = fake_completion.complete.await_args.args[0]
        assert '- Body Text Snippet: "Some body text"' in prompt
        assert '- Search Query (if any): "unrelated"' in prompt

    def test_repeated_requests_are_consistent(self, client, seed_rule, auth_headers, audit_rows):
        seed_rule(block_list=["reddit.com"])

        first = _check(client, auth_headers, url="https://old.reddit.com/r/python")
        second = _check(client, auth_headers, url="https://old.reddit.com/r/python")

        assert first.json() == second.json() == {"decision": "BLOCK"}
        assert len(audit_rows()) == 2


class TestCheckUrlErrors:
    def test_missing_api_key(self, client, seed_rule, audit_rows):
        seed_rule()

        response = client.post("/check-url", json={"url": "https://example.com"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing URL or API Key"
        assert audit_rows() == []

    def test_missing_url(self, client, seed_rule, auth_headers):
        seed_rule()

        response = _check(client, auth_headers, title="No URL here")

        assert response.status_code == 400
        assert response.json()["error"] == "MISSING_CREDENTIALS"

    def test_malformed_body(self, client, auth_headers):
        response = client.post(
            "/check-url",
            content=b"not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_unknown_api_key(self, client, seed_rule, audit_rows, fake_completion):
        seed_rule()

        response = _check(
            client, {"Authorization": "Bearer bk_wrong"}, url="https://example.com"
        )

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_API_KEY"
        fake_completion.complete.assert_not_awaited()
        assert audit_rows() == []


class TestHeartbeat:
    def test_known_key(self, client, seed_rule, db_session, test_api_key):
        row = seed_rule()

        response = client.post("/heartbeat", params={"key": test_api_key})

        assert response.status_code == 200
        assert response.text == "OK"
        db_session.expire_all()
        db_session.refresh(row)
        assert row.last_seen is not None

    @pytest.mark.parametrize("params", [{"key": "bk_unknown"}, {}])
    def test_always_ok(self, client, db_session, params):
        response = client.post("/heartbeat", params=params)

        assert response.status_code == 200
        assert response.text == "OK"


class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "Beacon Policy Service"

    def test_process_time_header(self, client):
        response = client.get("/health")

        assert "X-Process-Time" in response.headers
