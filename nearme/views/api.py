"""JSON API endpoints for directory data, submissions and engagement."""
import logging

from flask import Blueprint, current_app, jsonify, request
from kombu.exceptions import OperationalError

from nearme.domain.entities.business import (
    BusinessSubmission,
    ContactSubmission,
    EngagementEvent,
    SubmissionResult,
)
from nearme.domain.exceptions import DirectoryError
from nearme.domain.interfaces.data_provider import ISupportsMaintenance
from nearme.tasks.engagement_tasks import track_engagement_task
from nearme.views import get_container, request_subdomain_info

api_blueprint = Blueprint("api", __name__, url_prefix="/api")
_logger = logging.getLogger(__name__)


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _validation_error(message: str, error: ValueError):
    result = SubmissionResult(success=False, message=message, errors=[str(error)])
    return jsonify(result.to_dict()), 400


@api_blueprint.route("/businesses", methods=["GET"])
def list_businesses():
    """List active businesses, filtered by ?category= and ?city=."""
    category = request.args.get("category", "")
    city = request.args.get("city", "")
    businesses = get_container().get_provider().get_businesses(category, city)
    return jsonify({
        "businesses": [record.to_dict() for record in businesses],
        "count": len(businesses),
    }), 200


@api_blueprint.route("/businesses/<business_id>", methods=["GET"])
def get_business(business_id: str):
    record = get_container().get_provider().get_business_by_id(business_id)
    if record is None:
        return jsonify({"status": "error", "message": "Business not found"}), 404
    return jsonify(record.to_dict()), 200


@api_blueprint.route("/categories", methods=["GET"])
def list_categories():
    return jsonify({"categories": get_container().get_provider().get_categories()}), 200


@api_blueprint.route("/cities", methods=["GET"])
def list_cities():
    return jsonify({"cities": get_container().get_provider().get_cities()}), 200


@api_blueprint.route("/services", methods=["GET"])
def list_services():
    category = request.args.get("category", "")
    if not category.strip():
        return jsonify({"status": "error", "message": "Missing category parameter"}), 400
    services = get_container().get_provider().get_services(category)
    return jsonify({"services": services, "count": len(services)}), 200


@api_blueprint.route("/neighborhoods", methods=["GET"])
def list_neighborhoods():
    city = request.args.get("city", "")
    if not city.strip():
        return jsonify({"status": "error", "message": "Missing city parameter"}), 400
    neighborhoods = get_container().get_provider().get_neighborhoods(city)
    return jsonify({"neighborhoods": neighborhoods, "count": len(neighborhoods)}), 200


@api_blueprint.route("/subdomain", methods=["GET"])
def describe_subdomain():
    """Parsed routing intent and selected world for the request host."""
    subdomain_info = request_subdomain_info()
    world = get_container().get_world_router().select_world(subdomain_info)
    return jsonify({"subdomain": subdomain_info.to_dict(), "world": world.value}), 200


@api_blueprint.route("/track-engagement", methods=["POST"])
def track_engagement():
    """
    Record a user interaction.

    Always answers 200: engagement tracking must never break a page.
    """
    container = get_container()

    if not container.get_settings_resolver().is_enabled("enable_tracking", default=True):
        _logger.debug("Engagement tracking disabled by settings")
        return jsonify({"success": True}), 200

    body = _json_body()
    body.setdefault("user_agent", request.headers.get("User-Agent"))
    body.setdefault(
        "ip_address",
        request.headers.get("CF-Connecting-IP") or request.headers.get("X-Forwarded-For") or request.remote_addr,
    )
    try:
        event = EngagementEvent.from_payload(body)
    except ValueError as e:
        _logger.warning(f"Ignoring engagement event: {e}")
        return jsonify({"success": True}), 200

    if current_app.config.get("ENGAGEMENT_ASYNC"):
        try:
            track_engagement_task.delay(event.to_payload())
            return jsonify({"success": True}), 200
        except OperationalError as e:
            _logger.warning(f"Celery broker unavailable, tracking inline: {e}")

    try:
        container.get_provider().track_engagement(event)
    except DirectoryError as e:
        _logger.warning(f"Engagement event dropped: {e}")
    return jsonify({"success": True}), 200


@api_blueprint.route("/submit-business", methods=["POST"])
def submit_business():
    try:
        submission = BusinessSubmission.from_payload(_json_body())
    except ValueError as e:
        return _validation_error("Please correct the following errors:", e)

    result = get_container().get_provider().submit_business(submission)
    _logger.info(f"Business submission {result.id} received for {submission.site_id}")
    return jsonify(result.to_dict()), 200


@api_blueprint.route("/contact", methods=["POST"])
def submit_contact():
    body = _json_body()
    try:
        contact = ContactSubmission(
            name=body.get("name", ""),
            email=body.get("email", ""),
            message=body.get("message", ""),
            subject=body.get("subject") or "Contact Form Submission",
            category=body.get("category"),
            city=body.get("city"),
        )
    except ValueError as e:
        return _validation_error("Please correct the following errors:", e)

    result = get_container().get_provider().submit_contact(contact)
    return jsonify(result.to_dict()), 200


@api_blueprint.route("/admin/business-submissions", methods=["GET"])
def list_business_submissions():
    submissions = get_container().get_provider().get_business_submissions()
    return jsonify({"submissions": submissions, "count": len(submissions)}), 200


@api_blueprint.route("/admin/business-submissions", methods=["POST"])
def review_business_submission():
    """Approve or reject a submission: {"action", "id", "reviewerNotes"}."""
    body = _json_body()
    action = body.get("action")
    submission_id = body.get("id") or body.get("submissionId")
    reviewer_notes = body.get("reviewerNotes") or body.get("reviewer_notes")

    if not submission_id:
        return jsonify({"status": "error", "message": "Missing submission id"}), 400

    provider = get_container().get_provider()
    if action == "approve":
        provider.approve_business_submission(submission_id, reviewer_notes)
    elif action == "reject":
        provider.reject_business_submission(submission_id, reviewer_notes)
    else:
        return jsonify({"status": "error", "message": "Invalid action"}), 400

    _logger.info(f"Business submission {submission_id} {action}d")
    return jsonify({"success": True, "id": submission_id, "action": action}), 200


@api_blueprint.route("/admin/contact-messages", methods=["GET"])
def list_contact_messages():
    messages = get_container().get_provider().get_contact_messages()
    return jsonify({"messages": messages, "count": len(messages)}), 200


@api_blueprint.route("/admin/contact-messages", methods=["POST"])
def resolve_contact_message():
    """Resolve a contact message: {"action": "resolve", "id", "resolvedBy", "adminNotes"}."""
    body = _json_body()
    message_id = body.get("id")
    if body.get("action") != "resolve":
        return jsonify({"status": "error", "message": "Invalid action"}), 400
    if not message_id or not isinstance(message_id, (str, int)):
        return jsonify({"status": "error", "message": "Missing message id"}), 400

    get_container().get_provider().resolve_contact_message(
        str(message_id),
        resolved_by=body.get("resolvedBy") or body.get("resolved_by"),
        admin_notes=body.get("adminNotes") or body.get("admin_notes"),
    )
    _logger.info(f"Contact message {message_id} resolved")
    return jsonify({"success": True, "id": message_id}), 200


@api_blueprint.route("/admin/engagement", methods=["DELETE"])
def clear_sample_engagement():
    """Delete sample engagement events: {"action": "clear-sample", "identifier"}."""
    body = _json_body()
    identifier = body.get("identifier")
    if body.get("action") != "clear-sample" or not identifier:
        return jsonify({"status": "error", "message": "Invalid action"}), 400

    provider = get_container().get_provider()
    if not isinstance(provider, ISupportsMaintenance):
        return jsonify({
            "status": "error",
            "message": f"Backend '{provider.kind}' does not support maintenance",
        }), 501

    removed = provider.clear_sample_engagement_data(identifier)
    return jsonify({"success": True, "removed": removed if removed >= 0 else None}), 200


@api_blueprint.route("/admin/settings/<key>", methods=["GET"])
def get_setting(key: str):
    resolution = get_container().get_settings_resolver().resolve(key)
    return jsonify(resolution.to_dict()), 200
