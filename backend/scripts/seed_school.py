"""CLI script to seed the backend DB with faculties and students.

Usage: python scripts/seed_school.py [--file seed.json]

The optional JSON file has the shape
`{"faculties": [{"name", "color", "students": [{"name", "age"}]}]}`;
without it the four classic houses are created empty.
"""
import sys
import argparse
import json
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `school` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from school.database import engine, create_db_and_tables
from school import services

DEFAULT_FACULTIES = [
    {'name': 'Gryffindor', 'color': 'Red'},
    {'name': 'Hufflepuff', 'color': 'Yellow'},
    {'name': 'Ravenclaw', 'color': 'Blue'},
    {'name': 'Slytherin', 'color': 'Green'},
]


def main(seed_file: Optional[pathlib.Path] = None):
    """Create faculties (and their students) described by `seed_file`.

    Faculties whose name already exists are reused rather than duplicated.
    Results are printed to stdout for a quick CLI feedback loop.
    """
    faculties = DEFAULT_FACULTIES
    if seed_file is not None:
        if not seed_file.exists():
            print(f'Seed file not found at {seed_file}')
            return
        faculties = json.loads(seed_file.read_text(encoding='utf-8')).get('faculties', [])
    create_db_and_tables()
    with Session(engine) as session:
        faculty_svc = services.FacultyService(session)
        student_svc = services.StudentService(session)
        total_students = 0
        for f in faculties:
            existing = [x for x in faculty_svc.search_by_name_or_color(f['name']) if x.name == f['name']]
            faculty = existing[0] if existing else faculty_svc.create(f['name'], f.get('color'))
            for s in f.get('students', []):
                student_svc.create(s.get('name'), int(s.get('age', 0)), faculty.id)
                total_students += 1
            print(f"Faculty {faculty.name} (id {faculty.id}): {len(f.get('students', []))} students added")
        print(f'Total students created: {total_students}')


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--file', type=pathlib.Path, help='JSON file describing faculties and students')
    args = parser.parse_args()
    main(seed_file=args.file)
