#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
认证命令
intercom auth login / logout / whoami
"""

import sys
import getpass

from api import Credentials
from api.auth import workspace_of
from core.config import CliConfig
from utils.formatting import or_placeholder
from utils.validators import ValidationError, validate_region

from .common import CommandError, add_json_flag


def login(args, ctx):
    """校验令牌并保存凭据"""
    try:
        region = validate_region(args.region)
    except ValidationError as e:
        raise CommandError(str(e))

    token = args.token
    if not token:
        if not sys.stdin.isatty():
            raise CommandError(
                "No token provided. Use --token <token> or set INTERCOM_TOKEN env var "
                "in non-interactive mode."
            )
        token = getpass.getpass("Paste your Intercom API Access Token: ").strip()
        if not token:
            raise CommandError("Token cannot be empty")

    client = ctx.client_for(Credentials(token=token, region=region))
    with ctx.display.waiting("Validating token..."):
        me = client.get_me()

    admin_name = me.get("name") or me.get("email") or "Unknown"
    workspace = workspace_of(me)
    ctx.config_manager.write_config(
        CliConfig(
            token=token,
            workspace=workspace["workspace"] or "Unknown",
            app_id=workspace["app_id"],
            region=region,
        )
    )
    ctx.logger.info(f"已登录: {admin_name}（区域 {region.value}）")
    ctx.display.success(f"Logged in as {admin_name} (workspace: {workspace['workspace'] or 'Unknown'})")


def logout(args, ctx):
    if not ctx.config_manager.delete_config():
        ctx.logger.info("没有已保存的凭据")
    ctx.display.success("Logged out")


def whoami(args, ctx):
    """显示当前登录的管理员"""
    client = ctx.get_client()
    credentials = ctx.config_manager.resolve_credentials()
    with ctx.display.waiting("Fetching current admin..."):
        me = client.get_me()
    config = ctx.config_manager.read_config()
    workspace = workspace_of(me)
    workspace_name = workspace["workspace"] or (config.workspace if config else "")
    app_id = workspace["app_id"] or (config.app_id if config else "")

    if args.json:
        ctx.display.json({
            "id": str(me.get("id")),
            "name": me.get("name"),
            "email": me.get("email"),
            "workspace": workspace_name,
            "app_id": app_id,
            "region": credentials.region.value,
        })
        return

    ctx.display.table(
        ["Field", "Value"],
        [
            ["Name", or_placeholder(me.get("name"))],
            ["Email", or_placeholder(me.get("email"))],
            ["Workspace", or_placeholder(workspace_name)],
            ["App ID", or_placeholder(app_id)],
            ["Region", credentials.region.value],
        ],
    )


def register(subparsers):
    auth = subparsers.add_parser('auth', help='Manage Intercom authentication')
    actions = auth.add_subparsers(dest='action', metavar='<action>')
    actions.required = True

    p = actions.add_parser('login', help='Authenticate with your Intercom API token')
    p.add_argument('--token', help='API token (skips interactive prompt)')
    p.add_argument('--region', default='us', help='API region: us, eu, or au (default: us)')
    p.set_defaults(handler=login, json=False)

    p = actions.add_parser('logout', help='Remove stored Intercom credentials')
    p.set_defaults(handler=logout, json=False)

    p = actions.add_parser('whoami', help='Display the currently authenticated admin')
    add_json_flag(p)
    p.set_defaults(handler=whoami)
