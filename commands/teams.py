#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
团队命令
intercom teams list
"""

from utils.formatting import PLACEHOLDER

from .common import add_json_flag, list_payload


def list_teams(args, ctx):
    client = ctx.get_client()
    with ctx.display.waiting("Fetching teams..."):
        response = client.get("/teams")
    # 团队端点返回 teams，兼容 data
    teams = response.get("teams") or response.get("data") or []

    if args.json:
        ctx.display.json(list_payload([dict(t, id=str(t.get("id"))) for t in teams]))
        return
    if not teams:
        ctx.display.info("No teams found.")
        return
    ctx.display.table(
        ["ID", "Name", "Admins"],
        [
            [str(t.get("id")), t.get("name") or PLACEHOLDER, str(len(t.get("admin_ids") or []))]
            for t in teams
        ],
    )


def register(subparsers):
    teams = subparsers.add_parser('teams', help='List Intercom teams')
    actions = teams.add_subparsers(dest='action', metavar='<action>')
    actions.required = True

    p = actions.add_parser('list', help='List all teams')
    add_json_flag(p)
    p.set_defaults(handler=list_teams)
