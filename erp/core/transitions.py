"""
Status transition guard.

Each stateful entity (orders, budgets, projects, tasks) declares a
``TransitionTable`` listing, for every status, the statuses it may move
to. Status changes go through ``TransitionTable.transition`` which locks
the row, validates the move, saves it and runs the side effects
registered for that edge, all inside one database transaction.
"""
import logging
from collections import defaultdict

from django.db import transaction

from .exceptions import InvalidTransition

logger = logging.getLogger(__name__)

ANY = '*'


class TransitionTable:
    def __init__(self, entity, transitions, status_field='status'):
        self.entity = entity
        self.status_field = status_field
        self.transitions = {state: frozenset(targets) for state, targets in transitions.items()}
        self._effects = defaultdict(list)

    @property
    def states(self):
        return list(self.transitions)

    def allowed_targets(self, current):
        return sorted(self.transitions.get(current, ()))

    def can_transition(self, current, target):
        return target in self.transitions.get(current, ())

    def validate(self, current, target):
        if not self.can_transition(current, target):
            raise InvalidTransition(self.entity, current, target, self.allowed_targets(current))

    def on(self, source, target):
        """Register ``func(instance, previous, user)`` to run after a ``source -> target`` move.

        ``source`` may be ``ANY`` to match every origin.
        """
        def decorator(func):
            self._effects[(source, target)].append(func)
            return func
        return decorator

    def effects_for(self, source, target):
        return self._effects.get((source, target), []) + self._effects.get((ANY, target), [])

    def transition(self, instance, target, user=None):
        """Move ``instance`` to ``target`` and return the refreshed, saved instance."""
        model = type(instance)
        with transaction.atomic():
            locked = model.objects.select_for_update().get(pk=instance.pk)
            previous = getattr(locked, self.status_field)
            self.validate(previous, target)

            setattr(locked, self.status_field, target)
            locked.save()

            for effect in self.effects_for(previous, target):
                effect(locked, previous=previous, user=user)

        logger.info("%s #%s moved %s -> %s", self.entity, locked.pk, previous, target)
        return locked
