"""
Tests para la autenticación con el token del marketplace
"""
from fastapi import status
from jose import jwt

def test_missing_token_is_401(client):
    response = client.get("/bookings/mine")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_token_with_wrong_secret_is_401(client):
    token = jwt.encode({"id": "parent-1"}, "otro-secreto", algorithm="HS256")
    response = client.get("/bookings/mine", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_garbage_token_is_401(client):
    response = client.get("/dashboard/parent", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_token_is_forwarded_upstream(client, marketplace, auth_headers):
    seen = []
    original = marketplace.handler

    def spy(request):
        seen.append(request.headers.get("Authorization"))
        return original(request)

    marketplace.handler = spy
    response = client.get("/bookings/mine", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert seen and all(h == auth_headers["Authorization"] for h in seen)

def test_engine_endpoints_do_not_need_auth(client):
    assert client.get("/statuses").status_code == status.HTTP_200_OK
    assert client.post("/bookings/normalize", json={"response": []}).status_code == status.HTTP_200_OK
