import json

import click
from flask import current_app
from flask.cli import with_appcontext

from app import db
from app.models import University


DEFAULT_UNIVERSITIES = [
    {'name': 'Genel', 'shortName': 'GENEL', 'city': None, 'type': 'public'},
    {'name': 'Boğaziçi Üniversitesi', 'shortName': 'BOUN', 'city': 'İstanbul', 'type': 'public'},
    {'name': 'Orta Doğu Teknik Üniversitesi', 'shortName': 'ODTU', 'city': 'Ankara', 'type': 'public'},
    {'name': 'İstanbul Teknik Üniversitesi', 'shortName': 'ITU', 'city': 'İstanbul', 'type': 'public'},
    {'name': 'Bilkent Üniversitesi', 'shortName': 'BILKENT', 'city': 'Ankara', 'type': 'private'},
    {'name': 'Koç Üniversitesi', 'shortName': 'KOC', 'city': 'İstanbul', 'type': 'private'},
]


def upsert_universities(entries):
    """
    Insert or update universities matched on short name.

    Returns (created, updated). The default university is always ensured.
    """
    default_short_name = current_app.config['DEFAULT_UNIVERSITY_SHORT_NAME']
    if not any(entry.get('shortName') == default_short_name for entry in entries):
        entries = [{'name': 'Genel', 'shortName': default_short_name, 'type': 'public'}] + list(entries)

    created = updated = 0
    for entry in entries:
        short_name = (entry.get('shortName') or '').strip()
        name = (entry.get('name') or '').strip()
        if not short_name or not name:
            raise click.ClickException(f"Every university needs name and shortName: {entry!r}")

        university = University.query.filter_by(short_name=short_name).first()
        if university is None:
            university = University(short_name=short_name)
            if entry.get('id'):
                university.id = entry['id']
            db.session.add(university)
            created += 1
        else:
            updated += 1

        university.name = name
        university.city = entry.get('city')
        university.type = entry.get('type') or 'public'

    db.session.commit()
    return created, updated


@click.command('seed-universities')
@click.option('--file', 'path', type=click.Path(exists=True, dir_okay=False),
              help='JSON list of {name, shortName, city, type, id?} objects')
@with_appcontext
def seed_universities(path):
    """Create or update universities and refresh the university cache."""
    if path:
        with open(path, encoding='utf-8') as f:
            entries = json.load(f)
        if not isinstance(entries, list):
            raise click.ClickException('Seed file must contain a JSON list')
    else:
        entries = DEFAULT_UNIVERSITIES

    try:
        created, updated = upsert_universities(entries)
    except click.ClickException:
        db.session.rollback()
        raise

    current_app.extensions['university_cache'].invalidate()
    click.echo(f"Universities seeded: {created} created, {updated} updated")


def init_commands(app):
    app.cli.add_command(seed_universities)
