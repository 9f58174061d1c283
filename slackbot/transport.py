"""FastAPI transport - /slack routes for commands, events, interactives and select menus."""
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData
from starlette.formparsers import MultiPartException
from starlette.requests import ClientDisconnect

from slackbot.dispatcher import Reply
from slackbot.errors import BadRequestError, SlackbotError
from slackbot.verifier import request_verifier

if TYPE_CHECKING:
    from slackbot.bot import Bot

PREFIX = "/slack"


def to_response(reply: Reply) -> Response:
    if reply.media_type == "json":
        return JSONResponse(reply.body, status_code=reply.status_code)
    if reply.media_type == "text":
        return PlainTextResponse(reply.body, status_code=reply.status_code)
    return Response(status_code=reply.status_code)


async def _read_form(request: Request) -> FormData:
    try:
        return await request.form()
    except (MultiPartException, ClientDisconnect, UnicodeDecodeError, ValueError) as e:
        raise BadRequestError("unreadable form body") from e


async def _read_body(request: Request) -> bytes:
    try:
        return await request.body()
    except ClientDisconnect as e:
        raise BadRequestError("could not read request body") from e


def _payload_field(form: FormData) -> str | None:
    payload = form.get("payload")
    return payload if isinstance(payload, str) else None


def build_router(bot: "Bot", *, verify: bool) -> APIRouter:
    """Routes are central: a handler registered after boot is served without rewiring."""
    dependencies = []
    if verify:
        dependencies.append(
            Depends(request_verifier(lambda: bot.signing_secret, bot.settings.signature_max_age))
        )
    router = APIRouter(prefix=PREFIX, dependencies=dependencies)
    dispatcher = bot.dispatcher

    @router.post("/commands/{name}")
    async def commands(name: str, request: Request):
        form = await _read_form(request)
        reply = await run_in_threadpool(dispatcher.dispatch_command, name, form)
        return to_response(reply)

    @router.post("/events")
    async def events(request: Request):
        body = await _read_body(request)
        reply = await run_in_threadpool(dispatcher.dispatch_event, body)
        return to_response(reply)

    @router.post("/interactives")
    async def interactives(request: Request):
        form = await _read_form(request)
        reply = await run_in_threadpool(dispatcher.dispatch_interaction, _payload_field(form))
        return to_response(reply)

    @router.post("/menus")
    async def menus(request: Request):
        form = await _read_form(request)
        reply = await run_in_threadpool(dispatcher.dispatch_menu_options, _payload_field(form))
        return to_response(reply)

    bot.logger.info("Wired commands to %s/commands/{name}", PREFIX)
    bot.logger.info("Wired events to %s/events", PREFIX)
    bot.logger.info("Wired interactives to %s/interactives", PREFIX)
    bot.logger.info("Wired select menus to %s/menus", PREFIX)
    return router


def install_error_handlers(app: FastAPI, logger: logging.Logger) -> None:
    """Answer SlackbotError with its status code and an empty body."""

    async def handle_slackbot_error(request: Request, exc: SlackbotError) -> Response:
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(level, "%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc)
        return Response(status_code=exc.status_code)

    app.add_exception_handler(SlackbotError, handle_slackbot_error)


def prepare_app(app: FastAPI, bot: "Bot", *, verify: bool = True) -> FastAPI:
    """Mount the /slack routes and error handlers on an existing app. An app is wired once per bot."""
    if getattr(app.state, "slackbot", None) is bot:
        return app
    install_error_handlers(app, bot.logger)
    app.include_router(build_router(bot, verify=verify))
    app.state.slackbot = bot
    return app


def create_app(bot: "Bot", *, verify: bool = True) -> FastAPI:
    return prepare_app(FastAPI(title="slackbot"), bot, verify=verify)
