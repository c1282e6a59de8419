from datetime import timedelta

from app.domain.models import UserStatus

SIGNUP = {"fullname": "User Test", "email": "TEST@test.com ", "current_password": "test123"}


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_signup_returns_created_with_user_id(api, persistence, email_sender):
    response = api.post("/api/v1/auth/signup", json=SIGNUP)

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "test@test.com"
    assert body["message"] == "User created successfully"
    stored = persistence.find_by_id(body["userId"])
    assert stored.email == "test@test.com"
    assert stored.status is UserStatus.PENDING
    assert email_sender.sent[0][0] == "test@test.com"


def test_signup_validation_errors_share_one_shape(api):
    response = api.post("/api/v1/auth/signup", json={"fullname": "User Test"})
    assert response.status_code == 400
    assert response.json() == {
        "detail": "All required fields: fullname, email and password.",
        "error": "MissingFields",
    }


def test_signup_duplicate_email(api):
    payload = {**SIGNUP, "email": "test1@test.com"}
    api.post("/api/v1/auth/signup", json=payload)
    response = api.post("/api/v1/auth/signup", json=payload)
    assert response.status_code == 400
    assert response.json()["error"] == "DuplicateEmail"


def test_signup_notification_failure_removes_account(api, persistence, email_sender):
    email_sender.ok = False
    response = api.post("/api/v1/auth/signup", json=SIGNUP)
    assert response.status_code == 500
    assert response.json()["error"] == "NotificationFailed"
    assert persistence.find_by_email("test@test.com") is None


def test_full_registration_and_two_step_login(api, persistence, sms_sender):
    api.post("/api/v1/auth/signup", json=SIGNUP)
    code = persistence.find_by_email("test@test.com").verification_code

    verified = api.post("/api/v1/auth/verify", json={"email": "test@test.com", "code": code})
    assert verified.status_code == 200
    assert api.tokens.decode(verified.json()["token"])["id"] == persistence.find_by_email("test@test.com").id

    again = api.post("/api/v1/auth/verify", json={"email": "test@test.com", "code": code})
    assert again.status_code == 400
    assert again.json()["error"] == "AlreadyVerified"

    signin = api.post("/api/v1/auth/signin", json={"email": "test@test.com", "current_password": "test123"})
    assert signin.status_code == 200
    assert signin.json() == {"message": "2FA code sent"}
    assert "token" not in signin.json()
    two_factor = sms_sender.sent[-1][0]
    assert persistence.find_by_email("test@test.com").two_factor_code == two_factor

    login = api.post("/api/v1/auth/signin/verify", json={"email": "test@test.com", "code": two_factor})
    assert login.status_code == 200
    claims = api.tokens.decode(login.json()["token"])
    assert claims["email"] == "test@test.com"

    replay = api.post("/api/v1/auth/signin/verify", json={"email": "test@test.com", "code": two_factor})
    assert replay.status_code == 401
    assert replay.json()["error"] == "InvalidOrExpiredCode"


def test_second_factor_length_checked_before_presence(api):
    response = api.post("/api/v1/auth/signin/verify", json={"code": "12345"})
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidCodeLength"


def test_resend_unknown_email_is_not_found(api):
    response = api.post("/api/v1/auth/resend", json={"email": "ghost@test.com"})
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


def test_resend_sends_new_code(api, email_sender):
    api.post("/api/v1/auth/signup", json=SIGNUP)
    response = api.post("/api/v1/auth/resend", json={"email": "test@test.com"})
    assert response.status_code == 200
    assert len(email_sender.sent) == 2
    assert email_sender.sent[0][1] != email_sender.sent[1][1]


def test_signin_sms_failure_hides_cause(api, sms_sender):
    api.post("/api/v1/auth/signup", json=SIGNUP)
    sms_sender.ok = False
    response = api.post("/api/v1/auth/signin", json={"email": "test@test.com", "current_password": "test123"})
    assert response.status_code == 500
    assert response.json() == {"detail": "Login failed.", "error": "LoginFailed"}


def test_wrong_password(api):
    api.post("/api/v1/auth/signup", json=SIGNUP)
    response = api.post("/api/v1/auth/signin", json={"email": "test@test.com", "current_password": "nope123"})
    assert response.status_code == 400
    assert response.json()["error"] == "PasswordMismatch"


# superadmin-only routes ----------------------------------------------------------

def test_csv_routes_require_authorization_header(api):
    assert api.get("/api/v1/csv/departamentos").status_code == 401


def test_csv_routes_reject_invalid_token(api):
    response = api.get("/api/v1/csv/departamentos", headers=_auth("garbage"))
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"


def test_csv_routes_reject_token_for_missing_user(api):
    token = api.tokens.sign({"id": 999}, timedelta(hours=1))
    assert api.get("/api/v1/csv/municipios", headers=_auth(token)).status_code == 404


def test_csv_routes_reject_ordinary_users(api, persistence):
    api.post("/api/v1/auth/signup", json=SIGNUP)
    user = persistence.find_by_email("test@test.com")
    token = api.tokens.sign({"id": user.id}, timedelta(hours=1))
    response = api.get("/api/v1/csv/departamentos", headers=_auth(token))
    assert response.status_code == 403


def test_superadmin_uploads_and_lists_geography(api, superadmin_token):
    csv_body = (
        "REGION,CÓDIGO DANE DEL DEPARTAMENTO,DEPARTAMENTO,CÓDIGO DANE DEL MUNICIPIO,MUNICIPIO\n"
        "Caribe,08,Atlántico,08001,Barranquilla\n"
        "Caribe,08,Atlántico,,Soledad\n"
    ).encode("utf-8")

    upload = api.post(
        "/api/v1/csv/upload",
        headers=_auth(superadmin_token),
        files={"file": ("municipios.csv", csv_body, "text/csv")},
    )
    assert upload.status_code == 200
    assert upload.json()["totalFilas"] == 2
    assert upload.json()["logs"][-1] == "Fila 2: Datos incompletos. Se omite esta fila."

    departments = api.get("/api/v1/csv/departamentos", headers=_auth(superadmin_token)).json()
    assert [d["name"] for d in departments] == ["Atlántico"]

    municipalities = api.get("/api/v1/csv/municipios", headers=_auth(superadmin_token)).json()
    assert municipalities[0]["name"] == "Barranquilla"
    assert municipalities[0]["department"]["dane_code"] == "08"


def test_upload_without_file(api, superadmin_token):
    response = api.post("/api/v1/csv/upload", headers=_auth(superadmin_token))
    assert response.status_code == 400
    assert response.json()["detail"] == "Falta archivo"


def test_user_directory_hides_credentials(api, superadmin_token):
    api.post("/api/v1/auth/signup", json=SIGNUP)
    users = api.get("/api/v1/users", headers=_auth(superadmin_token)).json()
    assert {u["email"] for u in users} == {"admin@test.com", "test@test.com"}
    for user in users:
        assert "password_hash" not in user
        assert "verification_code" not in user

    first = api.get(f"/api/v1/users/{users[0]['id']}", headers=_auth(superadmin_token))
    assert first.status_code == 200
    assert api.get("/api/v1/users/999", headers=_auth(superadmin_token)).status_code == 404


def test_health(api):
    assert api.get("/health").json() == {"ok": True}
