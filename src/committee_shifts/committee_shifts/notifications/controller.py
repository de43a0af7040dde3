from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, error_response, internal_error, json_body, login_required
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notification-preferences", methods=["GET"], endpoint="get_notification_preferences")
    @login_required
    def get_notification_preferences():
        try:
            prefs = container.preferences_service.get_preferences(current_user_id())
            return jsonify(prefs.to_public_dict())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("fetch notification preferences")

    @app.route("/api/notification-preferences", methods=["PUT"], endpoint="update_notification_preferences")
    @login_required
    def update_notification_preferences():
        data = json_body()
        try:
            prefs = container.preferences_service.update_preferences(
                current_user_id(),
                shift_reminders=data.get("shiftReminders"),
                activity_reminders=data.get("activityReminders"),
                reminder_minutes_before=data.get("reminderMinutesBefore"),
            )
            return jsonify(prefs.to_public_dict())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("update notification preferences")

    @app.route("/api/vapid-public-key", methods=["GET"], endpoint="vapid_public_key")
    def vapid_public_key():
        return jsonify({"publicKey": app.config.get("VAPID_PUBLIC_KEY", "")})

    @app.route("/api/push-subscription", methods=["POST"], endpoint="save_push_subscription")
    @login_required
    def save_push_subscription():
        try:
            container.preferences_service.save_subscription(current_user_id(), json_body().get("subscription"))
            return jsonify({"message": "Subscription saved successfully"})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("save subscription")

    @app.route("/api/push-subscription", methods=["DELETE"], endpoint="remove_push_subscription")
    @login_required
    def remove_push_subscription():
        try:
            container.preferences_service.remove_subscription(current_user_id())
            return jsonify({"message": "Subscription removed successfully"})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("remove subscription")

    @app.route("/api/test-push", methods=["POST"], endpoint="test_push")
    @login_required
    def test_push():
        try:
            if not container.preferences_service.send_test(current_user_id()):
                return jsonify({"message": "Failed to send test notification", "error": "PushFailed"}), 502
            return jsonify({"message": "Test notification sent"})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("send test notification")
