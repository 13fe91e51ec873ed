import pytest
from fastapi.testclient import TestClient

from school.main import app

client = TestClient(app)


def _create_faculty(name, color):
    r = client.post('/faculty', json={'name': name, 'color': color})
    assert r.status_code == 200
    assert r.json() is not None
    return r.json()


@pytest.fixture
def houses():
    return [_create_faculty('Slytherin', 'Green'), _create_faculty('RavenClaw', 'Black')]


def test_create_faculty():
    body = _create_faculty('Hufflepuff', 'Blue')
    assert isinstance(body['id'], int)
    assert body['name'] == 'Hufflepuff'
    assert body['color'] == 'Blue'


def test_create_ignores_client_id():
    first = _create_faculty('Hufflepuff', 'Blue')
    r = client.post('/faculty', json={'id': first['id'], 'name': 'Gryffindor', 'color': 'Red'})
    assert r.status_code == 200
    assert r.json()['id'] != first['id']
    assert client.get(f"/faculty/{first['id']}").json()['name'] == 'Hufflepuff'


def test_find_faculty():
    created = _create_faculty('Slytherin', 'Green')
    r = client.get(f"/faculty/{created['id']}")
    assert r.status_code == 200
    assert r.json() == created


def test_edit_faculty():
    faculty = _create_faculty('Hufflepuff', 'Blue')
    faculty['color'] = 'Green'
    r = client.put('/faculty', json=faculty)
    assert r.status_code == 200
    assert r.json()['color'] == 'Green'
    assert client.get(f"/faculty/{faculty['id']}").json()['color'] == 'Green'


def test_edit_missing_faculty_returns_404():
    r = client.put('/faculty', json={'id': 9999, 'name': 'Nobody', 'color': 'Grey'})
    assert r.status_code == 404


def test_get_missing_faculty_returns_404():
    assert client.get('/faculty/9999').status_code == 404


def test_delete_faculty():
    faculty = _create_faculty('Hufflepuff', 'Blue')
    r = client.delete(f"/faculty/{faculty['id']}")
    assert r.status_code == 200
    assert client.get(f"/faculty/{faculty['id']}").status_code == 404
    # repeated delete has no visible effect
    assert client.delete(f"/faculty/{faculty['id']}").status_code == 200


def test_delete_faculty_keeps_and_detaches_students():
    faculty = _create_faculty('Gryffindor', 'Red')
    student = client.post('/student', json={'name': 'Harry', 'age': 11, 'faculty_id': faculty['id']}).json()
    client.delete(f"/faculty/{faculty['id']}")
    r = client.get(f"/student/{student['id']}")
    assert r.status_code == 200
    assert r.json()['faculty_id'] is None


def test_list_faculties(houses):
    r = client.get('/faculty')
    assert r.status_code == 200
    assert [f['name'] for f in r.json()] == ['Slytherin', 'RavenClaw']


def test_faculty_by_color_is_exact(houses):
    r = client.get('/faculty/color/Green')
    assert r.status_code == 200
    assert len(r.json()) == 1
    assert r.json()[0]['name'] == 'Slytherin'
    assert client.get('/faculty/color/green').json() == []


@pytest.mark.parametrize('search, expected', [
    ('sLytHerin', ['Slytherin']),
    ('BLACK', ['RavenClaw']),
    ('ravenclaw', ['RavenClaw']),
    ('purple', []),
])
def test_search_by_name_or_color_ignores_case(houses, search, expected):
    r = client.get('/faculty/search', params={'searchString': search})
    assert r.status_code == 200
    assert [f['name'] for f in r.json()] == expected


def test_search_requires_search_string():
    assert client.get('/faculty/search').status_code == 422


def test_faculty_by_student():
    expected = _create_faculty('Gryffindor', 'Red')
    student = client.post('/student', json={'faculty_id': expected['id']}).json()
    r = client.get('/faculty/by-student', params={'id': student['id']})
    assert r.status_code == 200
    assert r.json() == expected


def test_faculty_by_student_without_faculty_is_null():
    student = client.post('/student', json={'name': 'Luna', 'age': 12}).json()
    r = client.get('/faculty/by-student', params={'id': student['id']})
    assert r.status_code == 200
    assert r.json() is None


def test_faculty_by_unknown_student_returns_404():
    assert client.get('/faculty/by-student', params={'id': 9999}).status_code == 404


def test_edit_faculty_without_color_clears_it():
    faculty = _create_faculty('Hufflepuff', 'Blue')
    r = client.put('/faculty', json={'id': faculty['id'], 'name': 'Hufflepuff'})
    assert r.status_code == 200
    assert r.json()['color'] is None
    assert client.get(f"/faculty/{faculty['id']}").json() == {'id': faculty['id'], 'name': 'Hufflepuff', 'color': None}
