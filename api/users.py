from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from models.schemas.account import AccountOutSchema, AccountUpdateSchema
from services.auth import current_protocol
from utils.decorators import jwt_required
from utils.result import Failure
from .errors import failure_response

bp = Blueprint("users", __name__)

account_out_schema = AccountOutSchema()
account_update_schema = AccountUpdateSchema()


@bp.get("/profile")
@jwt_required()
def profile():
    """
    Get current account
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify(
        {
            "data": account_out_schema.dump(g.current_user),
            "message": "Current user fetched successfully",
        }
    ), 200


@bp.post("/update-details")
@jwt_required()
def update_details():
    """
    Update full name and email of the current account
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [full_name, email]
           properties:
             full_name: { type: string }
             email: { type: string }
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      409:
        description: Email already in use
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = account_update_schema.load(payload)

    outcome = current_protocol().update_details(g.current_user.id, data["full_name"], data["email"])
    if isinstance(outcome, Failure):
        return failure_response(outcome.error)

    return jsonify(
        {
            "data": account_out_schema.dump(outcome.value),
            "message": "Account updated successfully",
        }
    ), 200
