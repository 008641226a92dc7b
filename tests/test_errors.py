from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from aqui.core.errors import InternalError
from aqui.services import map_service

MAP_URL = "/api/v1/vendors/map-data"


def test_database_error_is_generic_500(client, monkeypatch):
    def broken_map_data(*args, **kwargs):
        raise SQLAlchemyError("connection to postgresql://aqui:secret dsn failed")

    monkeypatch.setattr(map_service, "map_data", broken_map_data)
    response = client.get(MAP_URL)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "secret dsn" not in response.text


def test_internal_error_hides_detail(client, monkeypatch):
    def broken_map_data(*args, **kwargs):
        raise InternalError("row 42 is corrupt")

    monkeypatch.setattr(map_service, "map_data", broken_map_data)
    response = client.get(MAP_URL)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
