#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
工单命令
intercom tickets list / get / update
"""

from typing import Any, Dict, List

from api import APIError, ErrorKind
from utils.formatting import PLACEHOLDER, iso_timestamp
from utils.validators import parse_limit

from .common import CommandError, add_json_flag, enrich, list_payload, resource_id


TICKET_STATES = ['submitted', 'in_progress', 'waiting_on_customer', 'resolved']


def enrich_ticket(t: Dict[str, Any]) -> Dict[str, Any]:
    return enrich(t, "created_at", "updated_at")


def ticket_title(t: Dict[str, Any]) -> str:
    return (t.get("ticket_attributes") or {}).get("title") or t.get("title") or PLACEHOLDER


def ticket_state(t: Dict[str, Any]) -> str:
    return (
        t.get("ticket_state")
        or t.get("state")
        or (t.get("ticket_attributes") or {}).get("state")
        or PLACEHOLDER
    )


def _matches_state(t: Dict[str, Any], state: str) -> bool:
    return state in (
        t.get("ticket_state"),
        t.get("state"),
        (t.get("ticket_attributes") or {}).get("state"),
    )


def render_ticket_table(ctx, tickets: List[Dict[str, Any]]):
    rows = []
    for t in tickets:
        contacts = (t.get("contacts") or {}).get("contacts") or []
        rows.append([
            str(t.get("id")),
            ticket_title(t),
            ticket_state(t),
            str(t["admin_assignee_id"]) if t.get("admin_assignee_id") else PLACEHOLDER,
            str(contacts[0].get("id")) if contacts else PLACEHOLDER,
            iso_timestamp(t.get("created_at")),
        ])
    ctx.display.table(["ID", "Title", "State", "Assignee", "Contact", "Created At"], rows)


def list_tickets(args, ctx):
    limit = parse_limit(args.limit)
    client = ctx.get_client()
    try:
        with ctx.display.waiting("Fetching tickets..."):
            tickets = client.paginate("/tickets", {}, "tickets", limit)
    except APIError as e:
        ctx.logger.debug(f"工单列表请求失败: {e.kind.code} ({e.status}) {e.message}")
        if e.kind in (ErrorKind.PERMISSION_DENIED, ErrorKind.REQUEST_FAILED, ErrorKind.NOT_FOUND):
            raise CommandError(
                "Could not fetch tickets. The Tickets API may require additional "
                "permissions or a specific Intercom plan.",
                code=e.kind.code,
                status=e.status,
            ) from e
        raise

    if args.state:
        tickets = [t for t in tickets if _matches_state(t, args.state)]
    if args.assigned_to:
        tickets = [t for t in tickets if str(t.get("admin_assignee_id")) == args.assigned_to]

    if args.json:
        ctx.display.json(list_payload([enrich_ticket(t) for t in tickets]))
        return
    if not tickets:
        ctx.display.info("No tickets found.")
        return
    render_ticket_table(ctx, tickets)


def get_ticket(args, ctx):
    ticket_id = resource_id(args.id, "ticket id")
    client = ctx.get_client()
    with ctx.display.waiting(f"Fetching ticket {ticket_id}..."):
        ticket = client.get(f"/tickets/{ticket_id}")

    if args.json:
        ctx.display.json(enrich_ticket(ticket))
        return
    ctx.display.table(
        ["Field", "Value"],
        [
            ["ID", str(ticket.get("id"))],
            ["Title", ticket_title(ticket)],
            ["State", ticket_state(ticket)],
            ["Created", iso_timestamp(ticket.get("created_at"))],
            ["Updated", iso_timestamp(ticket.get("updated_at"))],
        ],
    )


def update_ticket(args, ctx):
    ticket_id = resource_id(args.id, "ticket id")
    body = {}
    if args.state:
        body["ticket_state"] = args.state
    if args.assign_to:
        body["admin_assignee_id"] = resource_id(args.assign_to, "admin id")
    if not body:
        raise CommandError("Provide at least one option: --state or --assign-to.")

    client = ctx.get_client()
    with ctx.display.waiting(f"Updating ticket {ticket_id}..."):
        ticket = client.put(f"/tickets/{ticket_id}", body)

    if args.json:
        ctx.display.json(enrich_ticket(ticket))
        return
    ctx.display.success(f"Ticket {ticket_id} updated.")


def register(subparsers):
    tickets = subparsers.add_parser('tickets', help='Manage Intercom tickets')
    actions = tickets.add_subparsers(dest='action', metavar='<action>')
    actions.required = True

    p = actions.add_parser('list', help='List tickets')
    p.add_argument('--state', help='Filter: ' + ', '.join(TICKET_STATES))
    p.add_argument('--assigned-to', help='Filter by assignee admin ID')
    p.add_argument('--limit', default='20', help='Max results (default: 20)')
    add_json_flag(p)
    p.set_defaults(handler=list_tickets)

    p = actions.add_parser('get', help='Get a ticket by ID')
    p.add_argument('id')
    add_json_flag(p)
    p.set_defaults(handler=get_ticket)

    p = actions.add_parser('update', help='Update a ticket')
    p.add_argument('id')
    p.add_argument('--state', choices=TICKET_STATES, help='New state')
    p.add_argument('--assign-to', help='Assign to admin ID')
    add_json_flag(p)
    p.set_defaults(handler=update_ticket)
