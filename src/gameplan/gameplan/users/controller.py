from __future__ import annotations

from flask import Flask, request, session

from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..users.model import SessionContext, TrainerProfile
from ..web import current_context, json_body, json_ok, login_required


def profile_payload(ctx: SessionContext) -> dict:
    profile = ctx.profile
    data = {"uid": ctx.uid, "role": ctx.role.value, **profile.to_document()}
    if isinstance(profile, TrainerProfile):
        data["location"] = profile.fence.to_document()
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        ctx = container.auth_service.login(str(data.get("email", "")), str(data.get("password", "")))

        session.clear()
        session["uid"] = ctx.uid
        session["role"] = ctx.role.value
        return json_ok({"profile": profile_payload(ctx)})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return json_ok({"message": "Signed out."})

    @app.route("/api/auth/signup/trainer", methods=["POST"], endpoint="signup_trainer")
    def signup_trainer():
        data = json_body()
        trainer = container.signup_service.sign_up_trainer(
            name=str(data.get("name", "")),
            email=str(data.get("email", "")),
            password=str(data.get("password", "")),
            confirm_password=str(data.get("confirmPassword", "")),
            sport=str(data.get("sport", "")),
        )
        return json_ok({"message": "Trainer account created successfully!", "trainerID": trainer.trainer_id}, 201)

    @app.route("/api/auth/signup/student", methods=["POST"], endpoint="signup_student")
    def signup_student():
        student = container.signup_service.sign_up_student(json_body())
        return json_ok({"message": "Student account created successfully!", "studentID": student.student_id}, 201)

    @app.route("/api/auth/reset-password", methods=["POST"], endpoint="request_password_reset")
    def request_password_reset():
        email = str(json_body().get("email", ""))
        if not email.strip():
            raise ValidationError("Please enter your email.")
        container.auth_service.request_password_reset(email)
        return json_ok(
            {
                "message": "A password reset link has been sent to your email. "
                "Please check your inbox to reset your password."
            }
        )

    @app.route("/api/auth/reset-password/confirm", methods=["POST"], endpoint="confirm_password_reset")
    def confirm_password_reset():
        data = json_body()
        container.auth_service.reset_password(
            str(data.get("token", "")),
            password=str(data.get("password", "")),
            confirm_password=str(data.get("confirmPassword", "")),
        )
        return json_ok({"message": "Your password has been reset. You can sign in now."})

    @app.route("/api/auth/student-id", methods=["GET"], endpoint="generate_student_id")
    def generate_student_id():
        return json_ok({"studentID": container.signup_service.generate_student_id()})

    @app.route("/api/profile", methods=["GET"], endpoint="profile")
    @login_required
    def profile():
        return json_ok({"profile": profile_payload(current_context(container))})

    @app.route("/api/profile", methods=["PUT"], endpoint="update_profile")
    @login_required
    def update_profile():
        ctx = current_context(container)
        fields = json_body()
        if ctx.role == Role.TRAINER:
            trainer = container.profile_service.update_trainer(ctx, fields)
            updated = SessionContext(uid=ctx.uid, role=ctx.role, email=ctx.email, profile=trainer)
            return json_ok({"profile": profile_payload(updated)})

        result = container.profile_service.update_student(ctx, fields)
        updated = SessionContext(uid=ctx.uid, role=ctx.role, email=ctx.email, profile=result.profile)
        payload = {"profile": profile_payload(updated), "synced": result.synced}
        if result.notice:
            payload["notice"] = result.notice
        return json_ok(payload)

    @app.route("/api/trainer/location", methods=["PUT"], endpoint="trainer_location")
    @login_required
    def trainer_location():
        data = json_body()
        fence = container.profile_service.update_trainer_location(
            current_context(container),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            radius_meters=data.get("radius"),
        )
        return json_ok({"location": fence.to_document()})

    @app.route("/api/trainer/students", methods=["GET"], endpoint="trainer_students")
    @login_required
    def trainer_students():
        total = request.args.get("total_classes", type=int)
        students = container.roster_service.list_students(
            current_context(container),
            search=request.args.get("q", ""),
            total_classes=total,
        )
        payload: dict = {"students": students}
        if not students:
            payload["message"] = "No students found. Ask students to join using your Trainer ID."
        return json_ok(payload)
