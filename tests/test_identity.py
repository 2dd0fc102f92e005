from jose import jwt

from identity import OTP_ALPHABET, OTP_LENGTH, generate_otp


def test_generate_otp_shape():
    for _ in range(50):
        otp = generate_otp()
        assert len(otp) == OTP_LENGTH
        assert set(otp) <= set(OTP_ALPHABET)


def test_register_creates_pending_user_and_mails_otp(client, db, mailer):
    res = client.post("/register", json={"name": "A", "email": "a@x.com", "password": "p1", "profilePic": "pic.png"})
    assert res.status_code == 200
    assert res.json() == {"message": "Registration successful!"}

    user = db["user"].find_one({"email": "a@x.com"})
    assert user["verified"] is False
    assert user["profile_pic"] == "pic.png"
    assert len(user["verification_token"]) == OTP_LENGTH

    [(to, subject, html)] = mailer.dispatched
    assert to == "a@x.com"
    assert subject == "Verify your email address"
    assert user["verification_token"] in html


def test_register_missing_fields(client):
    res = client.post("/register", json={"email": "a@x.com", "password": "p1"})
    assert res.status_code == 400
    assert res.json() == {"message": "Please provide your name."}

    res = client.post("/register", json={"name": "A", "password": "p1"})
    assert res.json() == {"message": "Email is required!"}

    res = client.post("/register", json={"name": "A", "email": "a@x.com"})
    assert res.json() == {"message": "Please provide a password."}


def test_register_duplicate_email_leaves_user_untouched(client, db, register):
    register()
    before = db["user"].find_one({"email": "a@x.com"})

    res = client.post("/register", json={"name": "B", "email": "a@x.com", "password": "other"})
    assert res.status_code == 400
    assert res.json() == {"message": "User already exists"}
    assert db["user"].count_documents({}) == 1
    assert db["user"].find_one({"email": "a@x.com"}) == before


def test_register_succeeds_when_mail_fails(client, db, mailer):
    mailer.fail = True
    res = client.post("/register", json={"name": "A", "email": "a@x.com", "password": "p1"})
    assert res.status_code == 200
    assert db["user"].count_documents({}) == 1


def test_register_verify_login_scenario(client, db, settings, register):
    register()
    token = db["user"].find_one({"email": "a@x.com"})["verification_token"]

    res = client.get(f"/verify/{token}")
    assert res.status_code == 200
    assert res.json() == {"message": "OTP Verified"}
    user = db["user"].find_one({"email": "a@x.com"})
    assert user["verified"] is True
    assert user["verification_token"] is None

    res = client.post("/login", json={"email": "a@x.com", "password": "p1"})
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Login successful"
    assert jwt.decode(body["token"], settings.SECRET_KEY, algorithms=["HS256"]) == {"email": "a@x.com"}


def test_verify_twice_reports_not_found(client, db, register):
    register()
    token = db["user"].find_one({"email": "a@x.com"})["verification_token"]
    assert client.get(f"/verify/{token}").status_code == 200

    res = client.get(f"/verify/{token}")
    assert res.status_code == 400
    assert res.json() == {"message": "User not found."}


def test_pending_user_cannot_login(client, register):
    register()
    for password in ("p1", "wrong"):
        res = client.post("/login", json={"email": "a@x.com", "password": password})
        assert res.status_code == 400
        assert res.json() == {"message": "User not verified"}


def test_login_errors(client, register):
    res = client.post("/login", json={"email": "nobody@x.com", "password": "p1"})
    assert res.status_code == 400
    assert res.json() == {"message": "User not found"}

    register(verify=True)
    res = client.post("/login", json={"email": "a@x.com", "password": "P1"})
    assert res.status_code == 400
    assert res.json() == {"message": "Invalid Password"}


def test_resend_otp_replaces_token_even_when_verified(client, db, mailer, register):
    register(verify=True)
    mailer.dispatched.clear()

    res = client.post("/send-otp", json={"email": "a@x.com"})
    assert res.status_code == 200
    assert res.json() == {"message": "OTP sent successfully!"}
    user = db["user"].find_one({"email": "a@x.com"})
    assert user["verified"] is True
    assert user["verification_token"]
    assert len(mailer.dispatched) == 1

    res = client.post("/send-otp", json={"email": "nobody@x.com"})
    assert res.status_code == 400


def test_get_user_with_bearer_token(client, db):
    client.post("/register", json={"name": "A", "email": "a@x.com", "password": "p1", "profilePic": "pic.png"})
    client.get(f"/verify/{db['user'].find_one()['verification_token']}")
    token = client.post("/login", json={"email": "a@x.com", "password": "p1"}).json()["token"]

    res = client.get("/user", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    user = res.json()["user"]
    assert user["email"] == "a@x.com"
    assert user["name"] == "A"
    assert "id" in user
    assert user["profilePic"] == "pic.png"
    assert user["verified"] is True
    assert user["addresses"] == []
    for private in ("password", "verificationToken", "resetToken", "verification_token", "reset_token"):
        assert private not in user


def test_get_user_rejects_bad_tokens(client, settings):
    res = client.get("/user")
    assert res.status_code == 400
    assert res.json() == {"message": "Not authenticated"}

    res = client.get("/user", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 400
    assert res.json() == {"message": "Invalid token"}

    ghost = jwt.encode({"email": "ghost@x.com"}, settings.SECRET_KEY, algorithm="HS256")
    res = client.get("/user", headers={"Authorization": f"Bearer {ghost}"})
    assert res.status_code == 400
    assert res.json() == {"message": "User not found"}


def test_forgot_password_sends_reset_otp_synchronously(client, db, mailer, register):
    register(verify=True)
    res = client.post("/forgot-password", json={"email": "a@x.com"})
    assert res.status_code == 200
    reset_token = db["user"].find_one({"email": "a@x.com"})["reset_token"]
    [(to, subject, html)] = mailer.sent
    assert to == "a@x.com"
    assert subject == "Reset your password"
    assert reset_token in html

    # checking the OTP does not consume it
    for _ in range(2):
        res = client.post("/verify-reset-pass-otp", json={"otp": reset_token})
        assert res.status_code == 200
        assert res.json() == {"message": "OTP verified successfully"}

    res = client.post("/verify-reset-pass-otp", json={"otp": "999999"})
    assert res.status_code == 400
    assert res.json() == {"message": "Invalid OTP"}


def test_forgot_password_mail_failure_is_internal_error(client, mailer, register):
    register(verify=True)
    mailer.fail = True
    res = client.post("/forgot-password", json={"email": "a@x.com"})
    assert res.status_code == 500
    assert res.json() == {"message": "Error sending forgot password email"}


def test_forgot_password_unknown_email(client):
    res = client.post("/forgot-password", json={"email": "nobody@x.com"})
    assert res.status_code == 400
    assert res.json() == {"message": "User not found"}


def test_reset_password_ignores_otp(client, db, mailer, register):
    register(verify=True)
    client.post("/forgot-password", json={"email": "a@x.com"})

    res = client.post("/reset-password", json={"email": "a@x.com", "otp": "wrong!", "password": "p2"})
    assert res.status_code == 200
    assert res.json() == {"message": "Password reset successfully"}
    assert db["user"].find_one({"email": "a@x.com"})["reset_token"] is None
    assert mailer.dispatched[-1][1] == "Password reset successful"

    assert client.post("/login", json={"email": "a@x.com", "password": "p2"}).status_code == 200
    assert client.post("/login", json={"email": "a@x.com", "password": "p1"}).status_code == 400


def test_reset_password_unknown_email(client):
    res = client.post("/reset-password", json={"email": "nobody@x.com", "otp": "1", "password": "p2"})
    assert res.status_code == 400
    assert res.json() == {"message": "Invalid OTP"}


def test_reset_password_requires_new_password(client, db, register):
    register(verify=True)

    res = client.post("/reset-password", json={"email": "a@x.com", "otp": "123450"})
    assert res.status_code == 400
    assert res.json() == {"message": "Please provide a password."}
    assert db["user"].find_one({"email": "a@x.com"})["password"] == "p1"

    res = client.post("/reset-password", json={"email": "a@x.com", "otp": "123450", "password": ""})
    assert res.status_code == 400


def test_login_without_password_is_rejected(client, db, register):
    register(verify=True)
    db["user"].update_one({"email": "a@x.com"}, {"$set": {"password": None}})

    for body in ({"email": "a@x.com"}, {"email": "a@x.com", "password": None}, {"email": "a@x.com", "password": ""}):
        res = client.post("/login", json=body)
        assert res.status_code == 400
        assert res.json() == {"message": "Invalid Password"}


def test_reset_password_succeeds_when_confirmation_mail_fails(client, db, mailer, register):
    register(verify=True)
    mailer.fail = True

    res = client.post("/reset-password", json={"email": "a@x.com", "otp": "000000", "password": "p2"})
    assert res.status_code == 200
    assert res.json() == {"message": "Password reset successfully"}
    assert db["user"].find_one({"email": "a@x.com"})["password"] == "p2"


def test_resend_otp_succeeds_when_mail_fails(client, db, mailer, register):
    register()
    mailer.fail = True

    res = client.post("/send-otp", json={"email": "a@x.com"})
    assert res.status_code == 200
    assert res.json() == {"message": "OTP sent successfully!"}
    new_token = db["user"].find_one({"email": "a@x.com"})["verification_token"]
    assert new_token
    assert client.get(f"/verify/{new_token}").status_code == 200
