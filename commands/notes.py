#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
联系人备注命令
intercom notes add / list
"""

from utils.formatting import iso_timestamp, or_placeholder, preview, strip_html
from utils.validators import parse_limit

from .common import add_json_flag, enrich, list_payload, resolve_admin_id, resource_id


NOTE_PREVIEW_LENGTH = 80


def add_note(args, ctx):
    contact_id = resource_id(args.contact_id, "contact id")
    client = ctx.get_client()
    admin_id = resolve_admin_id(client, args.admin_id)
    with ctx.display.waiting(f"Adding note to contact {contact_id}..."):
        note = client.post(
            f"/contacts/{contact_id}/notes",
            {"admin_id": admin_id, "body": args.body},
        )

    if args.json:
        ctx.display.json(enrich(note, "created_at"))
        return
    ctx.display.success(f"Note added to contact {contact_id} (note ID {note.get('id')}).")


def list_notes(args, ctx):
    contact_id = resource_id(args.contact_id, "contact id")
    limit = parse_limit(args.limit)
    client = ctx.get_client()
    with ctx.display.waiting(f"Fetching notes for contact {contact_id}..."):
        notes = client.paginate(f"/contacts/{contact_id}/notes", {}, "data", limit)

    if args.json:
        ctx.display.json(list_payload([enrich(n, "created_at") for n in notes]))
        return
    if not notes:
        ctx.display.info("No notes found for this contact.")
        return

    rows = []
    for n in notes:
        author = n.get("author") or {}
        rows.append([
            str(n.get("id")),
            or_placeholder(author.get("name") or author.get("email")),
            preview(strip_html(n.get("body")), NOTE_PREVIEW_LENGTH),
            iso_timestamp(n.get("created_at")),
        ])
    ctx.display.table(["ID", "Author", "Note", "Created At"], rows)


def register(subparsers):
    notes = subparsers.add_parser('notes', help='Manage notes on contacts')
    actions = notes.add_subparsers(dest='action', metavar='<action>')
    actions.required = True

    p = actions.add_parser('add', help='Add a note to a contact')
    p.add_argument('contact_id', metavar='contact-id')
    p.add_argument('--body', required=True, help='Note text')
    p.add_argument('--admin-id', help='Admin ID authoring the note')
    add_json_flag(p)
    p.set_defaults(handler=add_note)

    p = actions.add_parser('list', help='List notes on a contact')
    p.add_argument('contact_id', metavar='contact-id')
    p.add_argument('--limit', default='20', help='Max results (default: 20)')
    add_json_flag(p)
    p.set_defaults(handler=list_notes)
