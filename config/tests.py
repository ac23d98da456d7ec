from unittest.mock import patch

import pytest
from django.db import DatabaseError
from rest_framework import status


@pytest.mark.django_db
class TestHealthCheck:

    def test_healthy(self, client):
        response = client.get('/api/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'status': 'ok'}

    def test_database_down(self, client):
        with patch('config.views.connection') as connection:
            connection.cursor.side_effect = DatabaseError('gone')
            response = client.get('/api/health/')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


@pytest.mark.django_db
def test_unknown_route_returns_json(client, settings):
    settings.DEBUG = False

    response = client.get('/api/nothing-here/')

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()['error'] == 'Not found'


@pytest.mark.django_db
def test_schema_builds(client):
    response = client.get('/api/schema/')

    assert response.status_code == status.HTTP_200_OK


def test_api_tests_are_not_redirected_to_https(client, settings, db):
    assert settings.SECURE_SSL_REDIRECT is False

    response = client.get('/api/health/')

    assert response.status_code == status.HTTP_200_OK
