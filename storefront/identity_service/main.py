# storefront/identity_service/main.py
from fastapi import FastAPI, Header, HTTPException

app = FastAPI(title="Identity Service (dev mock)")


USERS = {
    "alice-token": {"id": 1, "name": "Alice", "is_admin": False},
    "bob-token": {"id": 2, "name": "Bob", "is_admin": False},
    "admin-token": {"id": 99, "name": "Store Admin", "is_admin": True},
}


@app.get("/me")
def me(authorization: str | None = Header(None)):
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")

    user = USERS.get(authorization[7:].strip())
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user
