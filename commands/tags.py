#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
标签命令
intercom tags list / create
"""

from utils.formatting import PLACEHOLDER

from .common import CommandError, add_json_flag, list_payload


def list_tags(args, ctx):
    client = ctx.get_client()
    with ctx.display.waiting("Fetching tags..."):
        tags = client.list_tags()

    if args.json:
        ctx.display.json(list_payload([dict(t, id=str(t.get("id"))) for t in tags]))
        return
    if not tags:
        ctx.display.info("No tags found.")
        return
    ctx.display.table(
        ["ID", "Name", "Applied Count"],
        [[str(t.get("id")), t.get("name") or PLACEHOLDER, str(t.get("applied_count", PLACEHOLDER))] for t in tags],
    )


def create_tag(args, ctx):
    name = (args.name or "").strip()
    if not name:
        raise CommandError("Tag name cannot be empty.")
    client = ctx.get_client()
    with ctx.display.waiting(f'Creating tag "{name}"...'):
        tag = client.post("/tags", {"name": name})

    if args.json:
        ctx.display.json(dict(tag, id=str(tag.get("id"))))
        return
    ctx.display.success(f'Tag "{tag.get("name") or name}" created with ID {tag.get("id")}.')


def register(subparsers):
    tags = subparsers.add_parser('tags', help='Manage Intercom tags')
    actions = tags.add_subparsers(dest='action', metavar='<action>')
    actions.required = True

    p = actions.add_parser('list', help='List all tags')
    add_json_flag(p)
    p.set_defaults(handler=list_tags)

    p = actions.add_parser('create', help='Create a new tag')
    p.add_argument('--name', required=True, help='Tag name')
    add_json_flag(p)
    p.set_defaults(handler=create_tag)
