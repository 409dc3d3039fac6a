from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import requests

from meetup_planner_client import MeetupPlannerAPI


def response(status_code: int, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = b"{}" if payload is not None else b""
    resp.json.return_value = payload
    resp.text = ""
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error", response=resp)
    else:
        resp.raise_for_status.return_value = None
    return resp


def client_with(resp) -> tuple[MeetupPlannerAPI, MagicMock]:
    session = MagicMock(spec=requests.Session)
    if isinstance(resp, Exception):
        session.request.side_effect = resp
    else:
        session.request.return_value = resp
    return MeetupPlannerAPI(base_url="http://api.test/", api_key="token", session=session), session


def test_list_meetups_sends_date_and_page():
    api, session = client_with(response(200, [{"id": 1}]))

    data, error = api.list_meetups(day=date(2030, 5, 1), page=2)

    assert data == [{"id": 1}]
    assert error is None
    kwargs = session.request.call_args.kwargs
    assert kwargs["url"] == "http://api.test/api/v1/meetups/"
    assert kwargs["params"] == {"page": 2, "date": "2030-05-01"}
    assert kwargs["headers"] == {"Authorization": "Bearer token"}


def test_create_meetup_serialises_datetime():
    api, session = client_with(response(201, {"id": 7}))

    data, error = api.create_meetup(
        title="Python Night",
        description="Lightning talks about packaging",
        location="Room 101",
        scheduled_at=datetime(2030, 5, 10, 18, tzinfo=timezone.utc),
        banner_id=3,
    )

    assert data == {"id": 7}
    assert error is None
    assert session.request.call_args.kwargs["json"]["scheduled_at"] == "2030-05-10T18:00:00+00:00"


def test_api_error_detail_is_returned():
    api, _ = client_with(response(400, {"detail": "Can't subscribe to two meetups at the same hour"}))

    data, error = api.subscribe(5)

    assert data is None
    assert error == {"status_code": 400, "message": "Can't subscribe to two meetups at the same hour"}


def test_delete_meetup_reports_success_and_failure():
    api, _ = client_with(response(204))
    assert api.delete_meetup(5) == (True, None)

    api, _ = client_with(response(401, {"detail": "You can only cancel meetups 2 days in advance"}))
    ok, error = api.delete_meetup(5)
    assert ok is False
    assert error["status_code"] == 401


def test_connection_errors_are_returned():
    api, _ = client_with(requests.ConnectionError("refused"))

    data, error = api.list_subscriptions()

    assert data == []
    assert error == {"status_code": None, "message": "refused"}
