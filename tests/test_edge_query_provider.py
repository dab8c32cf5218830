"""Tests for EdgeQueryProvider with the HTTP session mocked."""
from unittest.mock import patch

import pytest
import requests

from nearme.domain.entities.business import BusinessSubmission, EngagementEvent
from nearme.domain.exceptions import BackendUnavailable, QueryFailed
from nearme.domain.interfaces.data_provider import ISupportsMaintenance
from nearme.infrastructure.providers.edge_query_provider import EdgeQueryProvider
from tests.conftest import make_response


SQL_ROWS = [
    {"id": "nail-salons-chicago-02", "name": "Lakeview Nails & Spa", "category": "nail-salons", "city": "chicago",
     "rating": 4.9, "verified": 1, "premium": 0, "status": "active",
     "services": "[\"Manicure\"]", "hours": "{\"monday\": \"10-8\"}"},
    {"id": "nail-salons-chicago-03", "name": "Bucktown Beauty Bar", "category": "Nail-Salons", "city": "Chicago",
     "rating": 4.9, "verified": 1, "premium": 0, "status": "active", "services": None, "hours": "not json"},
    {"id": "nail-salons-chicago-04", "name": "Avenue Nail Lounge", "category": "nail-salons", "city": "chicago",
     "rating": 4.5, "verified": 0, "premium": 1, "status": "active", "services": "[]", "hours": None},
    {"id": "nail-salons-chicago-01", "name": "Polished Loop Nail Studio", "category": "nail-salons",
     "city": "chicago", "rating": 4.8, "verified": 1, "premium": 1, "status": "active",
     "services": "[\"Gel Manicure\"]", "hours": "{}"},
]


@pytest.fixture
def provider() -> EdgeQueryProvider:
    return EdgeQueryProvider(api_base_url="https://edge.example.test/", api_key="secret", timeout=3)


def _sent_query(mock_request, call_index: int = 0):
    kwargs = mock_request.call_args_list[call_index].kwargs
    return kwargs["json"]["sql"], kwargs["json"]["params"]


def test_get_businesses_posts_parameterized_sql(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": SQL_ROWS})) as mock_request:
        businesses = provider.get_businesses("Nail Salons", "Chicago")

    kwargs = mock_request.call_args.kwargs
    assert kwargs["method"] == "POST"
    assert kwargs["url"] == "https://edge.example.test/api/query"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["timeout"] == 3

    sql, params = _sent_query(mock_request)
    assert "status = 'active'" in sql
    assert params == ["%nail%salons%", "%chicago%"]

    assert [b.id for b in businesses] == [
        "nail-salons-chicago-01",
        "nail-salons-chicago-04",
        "nail-salons-chicago-03",
        "nail-salons-chicago-02",
    ]


def test_rows_are_deserialized(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": SQL_ROWS})):
        businesses = {b.id: b for b in provider.get_businesses("nail-salons", "chicago")}

    assert businesses["nail-salons-chicago-02"].services == ["Manicure"]
    assert businesses["nail-salons-chicago-02"].verified is True
    assert businesses["nail-salons-chicago-03"].hours == {}
    assert businesses["nail-salons-chicago-03"].category == "nail-salons"


def test_empty_city_is_not_filtered(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": []})) as mock_request:
        assert provider.get_businesses("nail-salons") == []

    _, params = _sent_query(mock_request)
    assert params == ["%nail%salons%"]


def test_unsuccessful_query_raises_query_failed(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": False, "error": "no such table: businesses"})):
        with pytest.raises(QueryFailed, match="no such table"):
            provider.get_categories()


def test_unauthorized_raises_query_failed(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request", return_value=make_response(401, text="Unauthorized")):
        with pytest.raises(QueryFailed) as exc_info:
            provider.get_cities()

    assert exc_info.value.status_code == 401
    assert exc_info.value.backend == "d1"


def test_connection_error_raises_backend_unavailable(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      side_effect=requests.exceptions.ConnectionError("connection refused")):
        with pytest.raises(BackendUnavailable):
            provider.get_businesses("nail-salons", "chicago")


def test_categories_are_normalized(provider: EdgeQueryProvider) -> None:
    rows = [{"category": "Nail Salons"}, {"category": "nail-salons"}, {"category": "auto-repair"}]
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": rows})):
        assert provider.get_categories() == ["auto-repair", "nail-salons"]


def test_track_engagement_never_raises(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      side_effect=requests.exceptions.Timeout("slow")):
        provider.track_engagement(EngagementEvent(event_type="view", business_id="x"))


def test_track_engagement_inserts_event(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": []})) as mock_request:
        provider.track_engagement(EngagementEvent(event_type="call", business_id="b1", session_id="s1"))

    sql, params = _sent_query(mock_request)
    assert sql.startswith("INSERT INTO user_engagement_events")
    assert params[1:3] == ["b1", "call"]
    assert params[-1] == "s1"


def test_submit_business_returns_generated_id(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": []})) as mock_request:
        result = provider.submit_business(BusinessSubmission(name="Glow", category="Nail Salons", city="Chicago"))

    assert result.success
    assert result.id.startswith("business_")
    _, params = _sent_query(mock_request)
    assert params[0] == result.id
    assert params[2] == "nail-salons"


def test_approve_promotes_submission(provider: EdgeQueryProvider) -> None:
    submission = {"id": "business_1", "name": "Glow", "category": "nail-salons", "city": "chicago"}
    responses = [
        make_response(200, {"success": True, "data": [submission]}),
        make_response(200, {"success": True, "data": []}),
        make_response(200, {"success": True, "data": []}),
        make_response(200, {"success": True, "data": []}),
    ]
    with patch.object(provider.client.session, "request", side_effect=responses) as mock_request:
        provider.approve_business_submission("business_1", "ok")

    update_sql, update_params = _sent_query(mock_request, 1)
    assert update_sql.startswith("UPDATE business_submissions")
    assert update_params == ["approved", "ok", "business_1"]

    insert_sql, insert_params = _sent_query(mock_request, 3)
    assert insert_sql.startswith("INSERT INTO businesses")
    assert insert_params[0] == "nail-salons-chicago-business_1"


def test_reject_unknown_submission_raises(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": []})):
        with pytest.raises(QueryFailed):
            provider.reject_business_submission("business_missing")


def test_clear_sample_engagement_data(provider: EdgeQueryProvider) -> None:
    assert isinstance(provider, ISupportsMaintenance)

    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": []})) as mock_request:
        assert provider.clear_sample_engagement_data("sample-2024") == -1

    sql, params = _sent_query(mock_request)
    assert sql.startswith("DELETE FROM user_engagement_events")
    assert params == ["%sample-2024%"]


def test_get_setting_decodes_json_value(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": [{"setting_value": "false"}]})):
        assert provider.get_setting("enable_tracking") is False


def test_display_name_rows_match_their_slug(provider: EdgeQueryProvider) -> None:
    rows = SQL_ROWS + [
        {"id": "nail-salons-chicago-06", "name": "Spaced Out Nails", "category": "Nail   Salons",
         "city": " Chicago ", "rating": 3.0, "status": "active"},
        {"id": "x", "name": "Near Miss", "category": "nail-salons-supply", "city": "chicago", "status": "active"},
    ]
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": rows})):
        ids = [b.id for b in provider.get_businesses("nail-salons", "chicago")]

    assert "nail-salons-chicago-06" in ids
    assert "x" not in ids


def test_get_business_by_id_prefers_listing_id(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": [SQL_ROWS[0]]})) as mock_request:
        record = provider.get_business_by_id("nail-salons-chicago-02")

    assert record.id == "nail-salons-chicago-02"
    sql, params = _sent_query(mock_request)
    assert "business_id = ?" in sql
    assert params == ["nail-salons-chicago-02"] * 3


def test_get_services_filters_by_category_slug(provider: EdgeQueryProvider) -> None:
    rows = [
        {"name": "Pedicure", "slug": "Nail Salons"},
        {"name": "Gel Manicure", "slug": "nail-salons"},
        {"name": "Pedicure", "slug": "nail-salons"},
        {"name": "Wholesale Polish", "slug": "nail-salons-supply"},
    ]
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": rows})) as mock_request:
        assert provider.get_services("Nail Salons") == ["Gel Manicure", "Pedicure"]

    sql, params = _sent_query(mock_request)
    assert "FROM services" in sql
    assert params == ["%nail%salons%"]


def test_get_neighborhoods(provider: EdgeQueryProvider) -> None:
    rows = [{"name": "Lakeview", "slug": "chicago"}, {"name": "Bucktown", "slug": "Chicago"}]
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": rows})) as mock_request:
        assert provider.get_neighborhoods("chicago") == ["Bucktown", "Lakeview"]

    sql, _ = _sent_query(mock_request)
    assert "FROM neighborhoods" in sql


def test_empty_lookup_key_skips_query(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request") as mock_request:
        assert provider.get_services("  ") == []

    mock_request.assert_not_called()


def test_resolve_contact_message(provider: EdgeQueryProvider) -> None:
    responses = [
        make_response(200, {"success": True, "data": [{"id": "contact_1"}]}),
        make_response(200, {"success": True, "data": []}),
    ]
    with patch.object(provider.client.session, "request", side_effect=responses) as mock_request:
        provider.resolve_contact_message("contact_1", resolved_by="Ana", admin_notes="Called back")

    sql, params = _sent_query(mock_request, 1)
    assert sql.startswith("UPDATE contact_messages")
    assert params == ["Ana", "Called back", "contact_1"]


def test_resolve_unknown_contact_message_raises(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "request",
                      return_value=make_response(200, {"success": True, "data": []})):
        with pytest.raises(QueryFailed) as exc_info:
            provider.resolve_contact_message("contact_missing")

    assert exc_info.value.status_code == 404


def test_close_releases_session(provider: EdgeQueryProvider) -> None:
    with patch.object(provider.client.session, "close") as mock_close:
        provider.close()

    mock_close.assert_called_once()
