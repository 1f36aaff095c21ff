#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
联系人命令
intercom contacts list / get / find / create / update / conversations
"""

from typing import Any, Dict, List

from utils.formatting import PLACEHOLDER, iso_timestamp, or_placeholder, preview
from utils.validators import parse_limit

from .common import CommandError, add_json_flag, enrich, list_payload, resource_id


FIND_LIMIT = 10

# CLI 参数名 -> 请求体字段
CONTACT_FIELDS = [
    ("email", "email"),
    ("name", "name"),
    ("role", "role"),
    ("external_id", "external_id"),
    ("phone", "phone"),
]


def enrich_contact(c: Dict[str, Any]) -> Dict[str, Any]:
    return enrich(c, "created_at", "updated_at", "last_seen_at")


def _contact_body(args) -> Dict[str, Any]:
    body = {}
    for attr, key in CONTACT_FIELDS:
        value = getattr(args, attr, None)
        if value:
            body[key] = value
    return body


def _print_contacts(args, ctx, contacts: List[Dict[str, Any]], columns: List[str], empty: str):
    if args.json:
        ctx.display.json(list_payload([enrich_contact(c) for c in contacts]))
        return
    if not contacts:
        ctx.display.info(empty)
        return

    extractors = {
        "ID": lambda c: str(c.get("id")),
        "Name": lambda c: or_placeholder(c.get("name")),
        "Email": lambda c: or_placeholder(c.get("email")),
        "Role": lambda c: or_placeholder(c.get("role")),
        "External ID": lambda c: or_placeholder(c.get("external_id")),
        "Created At": lambda c: iso_timestamp(c.get("created_at")),
        "Last Seen": lambda c: iso_timestamp(c.get("last_seen_at")),
    }
    rows = [[extractors[col](c) for col in columns] for c in contacts]
    ctx.display.table(columns, rows)


def list_contacts(args, ctx):
    limit = parse_limit(args.limit)
    client = ctx.get_client()
    with ctx.display.waiting("Fetching contacts..."):
        contacts = client.paginate("/contacts", {}, "data", limit)
    _print_contacts(
        args, ctx, contacts,
        ["ID", "Name", "Email", "Role", "Created At", "Last Seen"],
        "No contacts found.",
    )


def get_contact(args, ctx):
    contact_id = resource_id(args.id, "contact id")
    client = ctx.get_client()
    with ctx.display.waiting(f"Fetching contact {contact_id}..."):
        contact = client.get(f"/contacts/{contact_id}")

    if args.json:
        ctx.display.json(enrich_contact(contact))
        return

    location = contact.get("location") or {}
    ctx.display.table(
        ["Field", "Value"],
        [
            ["ID", str(contact.get("id"))],
            ["Name", or_placeholder(contact.get("name"))],
            ["Email", or_placeholder(contact.get("email"))],
            ["Phone", or_placeholder(contact.get("phone"))],
            ["Role", or_placeholder(contact.get("role"))],
            ["External ID", or_placeholder(contact.get("external_id"))],
            ["Created", iso_timestamp(contact.get("created_at"))],
            ["Last Seen", iso_timestamp(contact.get("last_seen_at"))],
            ["City", or_placeholder(location.get("city"))],
            ["Country", or_placeholder(location.get("country"))],
            ["Browser", or_placeholder(contact.get("browser"))],
            ["OS", or_placeholder(contact.get("os"))],
        ],
    )


def find_contacts(args, ctx):
    if not args.email and not args.external_id:
        raise CommandError("Provide --email or --external-id to search.")

    filters = []
    if args.email:
        filters.append({"field": "email", "operator": "=", "value": args.email})
    if args.external_id:
        filters.append({"field": "external_id", "operator": "=", "value": args.external_id})

    client = ctx.get_client()
    with ctx.display.waiting("Searching contacts..."):
        contacts = client.paginate_search(
            "/contacts/search",
            {"query": {"operator": "AND", "value": filters}},
            "data",
            FIND_LIMIT,
        )
    _print_contacts(
        args, ctx, contacts,
        ["ID", "Name", "Email", "Role", "External ID", "Created At"],
        "No contacts found.",
    )


def create_contact(args, ctx):
    body = _contact_body(args)
    body.setdefault("role", "lead")
    client = ctx.get_client()
    with ctx.display.waiting("Creating contact..."):
        contact = client.post("/contacts", body)

    if args.json:
        ctx.display.json(enrich_contact(contact))
        return
    ctx.display.success(f"Contact created with ID {contact.get('id')}.")


def update_contact(args, ctx):
    contact_id = resource_id(args.id, "contact id")
    body = _contact_body(args)
    if not body:
        raise CommandError(
            "Provide at least one field to update: --email, --name, --role, --external-id, or --phone."
        )
    client = ctx.get_client()
    with ctx.display.waiting(f"Updating contact {contact_id}..."):
        contact = client.put(f"/contacts/{contact_id}", body)

    if args.json:
        ctx.display.json(enrich_contact(contact))
        return
    ctx.display.success(f"Contact {contact_id} updated.")


def contact_conversations(args, ctx):
    contact_id = resource_id(args.id, "contact id")
    limit = parse_limit(args.limit)
    client = ctx.get_client()
    with ctx.display.waiting(f"Fetching conversations for contact {contact_id}..."):
        conversations = client.paginate(f"/contacts/{contact_id}/conversations", {}, "conversations", limit)

    if args.json:
        ctx.display.json(list_payload([enrich(c, "updated_at") for c in conversations]))
        return
    if not conversations:
        ctx.display.info("No conversations found for this contact.")
        return

    rows = []
    for c in conversations:
        body = (c.get("source") or {}).get("body") or (c.get("conversation_message") or {}).get("body")
        rows.append([
            str(c.get("id")),
            c.get("state") or PLACEHOLDER,
            c.get("title") or preview(body, 50),
            iso_timestamp(c.get("updated_at")),
        ])
    ctx.display.table(["Conversation ID", "State", "Last Message Preview", "Updated At"], rows)


def _add_contact_fields(parser, role_default=None):
    parser.add_argument('--email', help='Contact email')
    parser.add_argument('--name', help='Contact name')
    parser.add_argument('--role', default=role_default, choices=['user', 'lead'], help='Role: user or lead')
    parser.add_argument('--external-id', help="Your system's user ID")
    parser.add_argument('--phone', help='Phone number')


def register(subparsers):
    contacts = subparsers.add_parser('contacts', help='Manage Intercom contacts (users and leads)')
    actions = contacts.add_subparsers(dest='action', metavar='<action>')
    actions.required = True

    p = actions.add_parser('list', help='List contacts')
    p.add_argument('--limit', default='20', help='Max results (default: 20)')
    add_json_flag(p)
    p.set_defaults(handler=list_contacts)

    p = actions.add_parser('get', help='Get a contact by Intercom ID')
    p.add_argument('id')
    add_json_flag(p)
    p.set_defaults(handler=get_contact)

    p = actions.add_parser('find', help='Find a contact by email or external ID')
    p.add_argument('--email', help='Find by email address')
    p.add_argument('--external-id', help='Find by external (your system) ID')
    add_json_flag(p)
    p.set_defaults(handler=find_contacts)

    p = actions.add_parser('create', help='Create a new contact')
    _add_contact_fields(p, role_default='lead')
    add_json_flag(p)
    p.set_defaults(handler=create_contact)

    p = actions.add_parser('update', help='Update an existing contact')
    p.add_argument('id')
    _add_contact_fields(p)
    add_json_flag(p)
    p.set_defaults(handler=update_contact)

    p = actions.add_parser('conversations', help='List all conversations for a contact')
    p.add_argument('id')
    p.add_argument('--limit', default='20', help='Max results (default: 20)')
    add_json_flag(p)
    p.set_defaults(handler=contact_conversations)
