# pylint: disable=broad-except
"""
Message bus for the provenance tracker.

A command goes to exactly one handler and its result is returned to the
caller. The domain events it raised are dispatched afterwards, once the
command's unit of work has committed and released the store lock.
"""

import logging
from typing import Callable, Dict, List, Type, Union

from provenance.domain.commands import (
    Command,
    FlagProduct,
    RegisterProduct,
    SubmitScannedUpdate,
    UpdateStatusByToken,
)
from provenance.domain.events import Event, ProductFlagged, ProductRegistered, StatusUpdated
from provenance.domain.exceptions import TrackerError
from provenance.service_layer import handlers
from provenance.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

Message = Union[Command, Event]


def handle(message: Message, uow: AbstractUnitOfWork) -> List[str]:
    """Dispatch message and every event it raises; returns the command results."""
    results = []
    queue = [message]

    while queue:
        message = queue.pop(0)
        if isinstance(message, Command):
            results.append(handle_command(message, queue, uow))
        elif isinstance(message, Event):
            handle_event(message, queue, uow)
        else:
            raise TypeError(f"{message!r} is neither a command nor an event")

    return results


def handle_command(command: Command, queue: List[Message], uow: AbstractUnitOfWork) -> str:
    logger.info(f"handling command {type(command).__name__}")
    handler = COMMAND_HANDLERS[type(command)]
    try:
        result = handler(command, uow=uow)
    except TrackerError as e:
        logger.warning(f"{type(command).__name__} rejected: {e}")
        raise
    except Exception:
        logger.exception("Exception handling command %s", command)
        raise

    queue.extend(uow.collect_new_events())
    return result


def handle_event(event: Event, queue: List[Message], uow: AbstractUnitOfWork):
    """Run every handler for event; a failing handler never undoes the command."""
    for handler in EVENT_HANDLERS[type(event)]:
        try:
            handler(event, uow=uow)
        except Exception:
            logger.exception(f"{handler.__name__} failed on {type(event).__name__}")
            continue
        queue.extend(uow.collect_new_events())


EVENT_HANDLERS = {
    ProductRegistered: [handlers.publish_event],
    StatusUpdated: [handlers.publish_event],
    ProductFlagged: [
        handlers.alert_support_on_flag,
        handlers.publish_event,
    ],
}  # type: Dict[Type[Event], List[Callable]]

COMMAND_HANDLERS = {
    RegisterProduct: handlers.register_product,
    UpdateStatusByToken: handlers.update_status_by_token,
    SubmitScannedUpdate: handlers.submit_scanned_update,
    FlagProduct: handlers.flag_product,
}  # type: Dict[Type[Command], Callable]
