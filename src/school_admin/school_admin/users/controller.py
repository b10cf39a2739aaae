from __future__ import annotations

from flask import Flask, session

from ..common.http import current_user, json_body, json_response, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email"), data.get("password"))
        session.clear()
        session.update(user.to_session())
        return json_response({"message": "Login successful", "user": user})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return json_response({"message": "Logged out"})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return json_response({"user": current_user()})
