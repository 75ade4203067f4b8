"""RegisterStore — add a store that reviewers can rate.

Catalog details beyond the display name live elsewhere; a new store starts
blind with zero counters.
"""

from protean.fields import String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import ratings
from ratings.store.store import Store


@ratings.command(part_of="Store")
class RegisterStore:
    name = String(required=True, max_length=100)


@ratings.command_handler(part_of=Store)
class RegisterStoreHandler:
    @handle(RegisterStore)
    def register_store(self, command):
        store = Store.register(name=command.name)
        current_domain.repository_for(Store).add(store)
        return str(store.id)
