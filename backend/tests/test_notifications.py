from app.models import Connection
from app.services.errors import UpstreamServiceError


def test_connect_creates_connection_and_notifies_stakeholder(client, db, login, knock, startup_user,
                                                            startup, stakeholder_user, stakeholder):
    login(startup_user.clerk_id)

    response = client.post("/api/notifications/connect", json={
        "stakeholder_id": stakeholder.id,
        "message": "We'd love your input on our trial design"
    })

    assert response.status_code == 201
    assert response.json()["notification_sent"] is True
    assert db.query(Connection).count() == 1

    workflow, recipients, data = knock.trigger_workflow.call_args[0]
    assert workflow == "startup-connection-request"
    assert recipients == [stakeholder_user.clerk_id]
    assert data["startupName"] == "CardioSense"
    assert data["message"] == "We'd love your input on our trial design"
    assert data["requestorId"] == startup_user.clerk_id


def test_connect_uses_supplied_startup_name(client, login, knock, startup_user, startup, stakeholder):
    login(startup_user.clerk_id)

    client.post("/api/notifications/connect", json={
        "stakeholder_id": stakeholder.id,
        "startup_name": "CardioSense Inc."
    })

    assert knock.trigger_workflow.call_args[0][2]["startupName"] == "CardioSense Inc."


def test_connect_keeps_connection_when_notification_fails(client, db, login, knock, startup_user,
                                                         startup, stakeholder):
    """The upstream status is reported but the connection is not rolled back"""
    knock.trigger_workflow.side_effect = UpstreamServiceError(
        "Notification service error: 503", status_code=503
    )
    login(startup_user.clerk_id)

    response = client.post("/api/notifications/connect", json={"stakeholder_id": stakeholder.id})

    assert response.status_code == 503
    data = response.json()
    assert "notification failed" in data["error"]
    connection = db.query(Connection).one()
    assert data["connection_id"] == connection.id
    assert connection.status == "pending"


def test_connect_duplicate_does_not_notify(client, db, login, knock, startup_user, startup, stakeholder):
    login(startup_user.clerk_id)
    client.post("/api/notifications/connect", json={"stakeholder_id": stakeholder.id})
    knock.trigger_workflow.reset_mock()

    response = client.post("/api/notifications/connect", json={"stakeholder_id": stakeholder.id})

    assert response.status_code == 409
    knock.trigger_workflow.assert_not_called()
