from dishka import Provider as DishkaProvider

from immersion.util.di.scope import Scope


class Provider(DishkaProvider):
    """Dishka provider defaulting to the unit-of-work scope."""

    scope = Scope.UOW
