#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
会话命令

模块概述：
    intercom conversations（别名 conv）命令组：列表、详情、回复、
    分配、关闭、稍后处理、打标签与搜索。列表和搜索走 POST 搜索分页，
    其余操作为单次调用。

命令与端点：
    list    POST /conversations/search
    get     GET  /conversations/{id}?display_as=plaintext
    reply   POST /conversations/{id}/reply
    assign  POST /conversations/{id}/parts   (message_type=assignment)
    close   POST /conversations/{id}/parts   (message_type=close)
    snooze  POST /conversations/{id}/parts   (message_type=snoozed)
    tag     POST /conversations/{id}/tags
    search  POST /conversations/search

作者: Intercom CLI Team
版本: 0.1.0
"""

from typing import Any, Dict, List

from utils.formatting import (
    PLACEHOLDER,
    human_duration,
    iso_timestamp,
    minutes_since,
    preview,
    strip_html,
)
from utils.validators import ValidationError, parse_datetime, parse_limit, to_unix

from .common import (
    CommandError,
    add_json_flag,
    enrich,
    list_payload,
    require_tag,
    resolve_admin_id,
    resource_id,
)


MAX_LIST_LIMIT = 150
SEARCH_PAGE_SIZE = 50
SEARCH_FILTER_HINT = "Provide at least one search filter: --query, --state, --tag, --after, or --before."


def enrich_conversation(c: Dict[str, Any]) -> Dict[str, Any]:
    enriched = enrich(c, "created_at", "updated_at", "waiting_since")
    enriched["waiting_since_minutes"] = minutes_since(c.get("waiting_since"))
    return enriched


def _subject(c: Dict[str, Any]) -> str:
    if c.get("title"):
        return c["title"]
    source_body = (c.get("source") or {}).get("body")
    if source_body:
        return preview(source_body)
    return preview((c.get("conversation_message") or {}).get("body"))


def _tag_names(c: Dict[str, Any]) -> str:
    tags = (c.get("tags") or {}).get("tags") or []
    return ", ".join(t.get("name", "") for t in tags) or PLACEHOLDER


def _assignee(c: Dict[str, Any]) -> str:
    if c.get("admin_assignee_id"):
        return str(c["admin_assignee_id"])
    if c.get("team_assignee_id"):
        return f"Team {c['team_assignee_id']}"
    return PLACEHOLDER


def render_conversation_table(ctx, conversations: List[Dict[str, Any]]):
    rows = [
        [
            str(c.get("id")),
            c.get("state") or PLACEHOLDER,
            _subject(c),
            _assignee(c),
            human_duration(c.get("waiting_since")),
            _tag_names(c),
        ]
        for c in conversations
    ]
    ctx.display.table(["ID", "State", "Subject/Preview", "Assignee", "Waiting", "Tags"], rows)


def _author(author: Dict[str, Any], fallback: str) -> str:
    return author.get("name") or author.get("email") or fallback


def render_conversation_thread(ctx, conversation_id: str, conversation: Dict[str, Any]):
    """按时间顺序打印会话正文和各个部分"""
    out = ctx.display
    rule = "─" * 60
    out.line("")
    out.line(rule)
    out.line(f"Conversation #{conversation_id}: {conversation.get('title') or 'Untitled conversation'}")
    out.line(f"State: {conversation.get('state')}  |  Created: {iso_timestamp(conversation.get('created_at'))}")
    out.line(rule)
    out.line("")

    source = conversation.get("source") or conversation.get("conversation_message")
    if source:
        author = _author(source.get("author") or {}, "Unknown")
        out.line(f"[{iso_timestamp(conversation.get('created_at'))}] {author}:")
        out.line(f"  {strip_html(source.get('body'))}")
        out.line("")

    parts = (conversation.get("conversation_parts") or {}).get("conversation_parts") or []
    for part in parts:
        part_author = part.get("author") or {}
        author = _author(part_author, part_author.get("type") or "System")
        time_text = iso_timestamp(part.get("created_at"))
        part_type = part.get("part_type") or ""
        body = strip_html(part.get("body"))

        if part_type == "assignment":
            assigned = _author(part.get("assigned_to") or {}, "unknown")
            out.line(f"[{time_text}] ← Assigned to {assigned} by {author}")
        elif part_type == "close":
            out.line(f"[{time_text}] ← Closed by {author}")
        elif part_type == "open":
            out.line(f"[{time_text}] ← Reopened by {author}")
        elif body:
            label = f"{author} (note)" if part_type == "note" else author
            out.line(f"[{time_text}] {label}:")
            out.line(f"  {body}")
        else:
            out.line(f"[{time_text}] ← {part_type} by {author}")
        out.line("")


def _eq(field: str, value: Any) -> Dict[str, Any]:
    return {"field": field, "operator": "=", "value": value}


def build_search_body(filters: List[Dict[str, Any]], limit: int, sort_field: str = "updated_at") -> Dict[str, Any]:
    return {
        "query": {"operator": "AND", "value": filters},
        "sort": {"field": sort_field, "order": "desc"},
        "pagination": {"per_page": min(limit, SEARCH_PAGE_SIZE)},
    }


def list_conversations(args, ctx):
    limit = parse_limit(args.limit, maximum=MAX_LIST_LIMIT)
    filters = []
    if args.state:
        filters.append(_eq("state", args.state))
    if args.assigned_to:
        filters.append(_eq("admin_assignee_id", args.assigned_to))
    if args.team:
        filters.append(_eq("team_assignee_id", args.team))
    if not filters:
        filters.append(_eq("state", "open"))

    client = ctx.get_client()
    body = build_search_body(filters, limit, args.sort or "updated_at")
    with ctx.display.waiting("Fetching conversations..."):
        conversations = client.paginate_search("/conversations/search", body, "conversations", limit)

    if args.json:
        ctx.display.json(list_payload([enrich_conversation(c) for c in conversations]))
        return
    if not conversations:
        ctx.display.info("No conversations found.")
        return
    render_conversation_table(ctx, conversations)


def get_conversation(args, ctx):
    conversation_id = resource_id(args.id, "conversation id")
    client = ctx.get_client()
    with ctx.display.waiting(f"Fetching conversation {conversation_id}..."):
        conversation = client.get(f"/conversations/{conversation_id}", {"display_as": "plaintext"})

    if args.json:
        ctx.display.json(enrich_conversation(conversation))
        return
    render_conversation_thread(ctx, conversation_id, conversation)


def reply(args, ctx):
    conversation_id = resource_id(args.id, "conversation id")
    client = ctx.get_client()
    admin_id = resolve_admin_id(client, args.admin_id)
    body = {
        "message_type": args.type,
        "type": "admin",
        "admin_id": admin_id,
        "body": args.message,
    }
    with ctx.display.waiting(f"Sending {args.type} on conversation {conversation_id}..."):
        result = client.post(f"/conversations/{conversation_id}/reply", body)

    if args.json:
        ctx.display.json(enrich_conversation(result))
        return
    label = "Note" if args.type == "note" else "Reply"
    ctx.display.success(f"{label} sent on conversation {conversation_id}.")


def assign(args, ctx):
    conversation_id = resource_id(args.id, "conversation id")
    if args.unassign:
        assignee_id = "0"
        done = f"Conversation {conversation_id} unassigned."
    elif args.admin:
        assignee_id = resource_id(args.admin, "admin id")
        done = f"Conversation {conversation_id} assigned to admin {assignee_id}."
    elif args.team:
        assignee_id = resource_id(args.team, "team id")
        done = f"Conversation {conversation_id} assigned to team {assignee_id}."
    else:
        raise CommandError("Provide --admin <id>, --team <id>, or --unassign.")

    client = ctx.get_client()
    body = {
        "message_type": "assignment",
        "type": "admin",
        "admin_id": resolve_admin_id(client, None),
        "assignee_id": assignee_id,
    }
    with ctx.display.waiting(f"Assigning conversation {conversation_id}..."):
        result = client.post(f"/conversations/{conversation_id}/parts", body)

    if args.json:
        ctx.display.json(enrich_conversation(result))
        return
    ctx.display.success(done)


def close(args, ctx):
    conversation_id = resource_id(args.id, "conversation id")
    client = ctx.get_client()
    body = {
        "message_type": "close",
        "type": "admin",
        "admin_id": resolve_admin_id(client, None),
    }
    with ctx.display.waiting(f"Closing conversation {conversation_id}..."):
        result = client.post(f"/conversations/{conversation_id}/parts", body)

    if args.json:
        ctx.display.json(enrich_conversation(result))
        return
    ctx.display.success(f"Conversation {conversation_id} closed.")


def snooze(args, ctx):
    conversation_id = resource_id(args.id, "conversation id")
    try:
        until = parse_datetime(args.until)
    except ValidationError as e:
        raise CommandError(str(e))
    snoozed_until = to_unix(until)

    client = ctx.get_client()
    body = {
        "message_type": "snoozed",
        "type": "admin",
        "admin_id": resolve_admin_id(client, None),
        "snoozed_until": snoozed_until,
    }
    with ctx.display.waiting(f"Snoozing conversation {conversation_id}..."):
        result = client.post(f"/conversations/{conversation_id}/parts", body)

    if args.json:
        ctx.display.json(enrich_conversation(result))
        return
    ctx.display.success(f"Conversation {conversation_id} snoozed until {iso_timestamp(snoozed_until)}.")


def tag(args, ctx):
    conversation_id = resource_id(args.id, "conversation id")
    client = ctx.get_client()
    admin_id = resolve_admin_id(client, args.admin_id)
    found = require_tag(client, args.tag, f'Create it first with: intercom tags create --name "{args.tag}"')

    with ctx.display.waiting(f"Tagging conversation {conversation_id}..."):
        result = client.post(
            f"/conversations/{conversation_id}/tags",
            {"admin_id": admin_id, "id": found.get("id")},
        )

    if args.json:
        ctx.display.json(result)
        return
    ctx.display.success(f'Tag "{args.tag}" applied to conversation {conversation_id}.')


def _date_filter(value, operator: str):
    if not value:
        return None
    try:
        moment = parse_datetime(value)
    except ValidationError as e:
        raise CommandError(str(e))
    return {"field": "created_at", "operator": operator, "value": to_unix(moment)}


def search(args, ctx):
    if not (args.query or args.state or args.tag or args.after or args.before):
        raise CommandError(SEARCH_FILTER_HINT)

    limit = parse_limit(args.limit, maximum=MAX_LIST_LIMIT)
    client = ctx.get_client()

    filters = []
    if args.query:
        filters.append({"field": "source.body", "operator": "~", "value": args.query})
    if args.state:
        filters.append(_eq("state", args.state))
    if args.tag:
        found = require_tag(client, args.tag, "List tags with: intercom tags list")
        filters.append(_eq("tag_ids", found.get("id")))
    for value, operator in ((args.after, ">"), (args.before, "<")):
        date_filter = _date_filter(value, operator)
        if date_filter:
            filters.append(date_filter)

    body = build_search_body(filters, limit)
    with ctx.display.waiting("Searching conversations..."):
        conversations = client.paginate_search("/conversations/search", body, "conversations", limit)

    if args.json:
        ctx.display.json(list_payload([enrich_conversation(c) for c in conversations]))
        return
    if not conversations:
        ctx.display.info("No conversations found matching your search.")
        return

    rows = [
        [
            str(c.get("id")),
            c.get("state") or PLACEHOLDER,
            _subject(c),
            str(c["admin_assignee_id"]) if c.get("admin_assignee_id") else PLACEHOLDER,
            iso_timestamp(c.get("updated_at")),
        ]
        for c in conversations
    ]
    ctx.display.table(["ID", "State", "Subject/Preview", "Assignee", "Updated"], rows)


def register(subparsers):
    conv = subparsers.add_parser('conversations', aliases=['conv'], help='Manage Intercom conversations')
    actions = conv.add_subparsers(dest='action', metavar='<action>')
    actions.required = True

    p = actions.add_parser('list', help='List conversations')
    p.add_argument('--state', default='open', help='Filter by state: open, closed, snoozed, pending (default: open)')
    p.add_argument('--assigned-to', help='Filter by assignee admin ID')
    p.add_argument('--team', help='Filter by team ID')
    p.add_argument('--limit', default='20', help='Max results (default: 20, max: 150)')
    p.add_argument('--sort', default='updated_at', help='Sort by: created_at, updated_at')
    add_json_flag(p)
    p.set_defaults(handler=list_conversations)

    p = actions.add_parser('get', help='Get a conversation with its full thread')
    p.add_argument('id')
    add_json_flag(p)
    p.set_defaults(handler=get_conversation)

    p = actions.add_parser('reply', help='Reply to a conversation')
    p.add_argument('id')
    p.add_argument('--message', required=True, help='Reply message body')
    p.add_argument('--admin-id', help='Admin ID sending the reply')
    p.add_argument('--type', default='comment', choices=['comment', 'note'], help='Reply type')
    add_json_flag(p)
    p.set_defaults(handler=reply)

    p = actions.add_parser('assign', help='Assign a conversation to an admin or team')
    p.add_argument('id')
    target = p.add_mutually_exclusive_group()
    target.add_argument('--admin', help='Assign to admin ID')
    target.add_argument('--team', help='Assign to team ID')
    target.add_argument('--unassign', action='store_true', help='Remove current assignment')
    add_json_flag(p)
    p.set_defaults(handler=assign)

    p = actions.add_parser('close', help='Close a conversation')
    p.add_argument('id')
    add_json_flag(p)
    p.set_defaults(handler=close)

    p = actions.add_parser('snooze', help='Snooze a conversation until a specific time')
    p.add_argument('id')
    p.add_argument('--until', required=True, help='Snooze until this datetime (ISO 8601 or YYYY-MM-DD)')
    add_json_flag(p)
    p.set_defaults(handler=snooze)

    p = actions.add_parser('tag', help='Tag a conversation')
    p.add_argument('id')
    p.add_argument('--tag', required=True, help='Tag name to apply')
    p.add_argument('--admin-id', help='Admin ID performing the action')
    add_json_flag(p)
    p.set_defaults(handler=tag)

    p = actions.add_parser('search', help='Search conversations')
    p.add_argument('--query', help='Full-text search query')
    p.add_argument('--state', help='Filter by state')
    p.add_argument('--tag', help='Filter by tag name')
    p.add_argument('--after', help='Created after date (YYYY-MM-DD)')
    p.add_argument('--before', help='Created before date (YYYY-MM-DD)')
    p.add_argument('--limit', default='20', help='Max results (default: 20)')
    add_json_flag(p)
    p.set_defaults(handler=search)
