"""
Application settings with prefbind.

Shows user and system scoped fields, string defaults, a private collection,
and how to keep richer data in a preference by encoding it to a JSON string
field before persisting.

Run it a few times and watch the counter go up:
    python examples/app_settings.py
"""

import json
from dataclasses import asdict, dataclass
from typing import Annotated, Dict, List, Optional, Set

import prefbind
from prefbind import Pref, Scope, pref_settings


@dataclass
class User:
    name: str
    age: int
    address: Optional[str] = None


@pref_settings(path="/com/example/prefbind/demo")
class AppSettings:
    sys_license: Annotated[Optional[str], Pref(Scope.SYSTEM, key="license", default="UNLICENSED")] = None
    last_dir: Annotated[Optional[str], Pref()] = None
    times_ran: Annotated[int, Pref(Scope.SYSTEM)] = 0
    save_on_exit: Annotated[bool, Pref(default="true")] = True
    mapping: Annotated[Optional[Dict[str, str]], Pref(key="map")] = None

    # Private fields work too
    __cache: Annotated[Set[str], Pref()]

    # Anything else: store it as a JSON string
    __users_data: Annotated[Optional[str], Pref(key="usersData")]

    def __init__(self):
        self.__cache = set()
        self.__users_data = None
        self.users: List[User] = []

    @property
    def cache(self) -> Set[str]:
        return self.__cache

    def save(self) -> None:
        self.__users_data = json.dumps([asdict(u) for u in self.users])
        prefbind.persist(self)

    def load(self) -> None:
        prefbind.restore(self)
        if self.__users_data:
            self.users = [User(**u) for u in json.loads(self.__users_data)]


def main():
    # Keep the demo out of the real config folders
    prefbind.configure(user="sqlite:///prefbind-demo.db", system="sqlite:///prefbind-demo.db")

    settings = AppSettings()
    settings.load()

    settings.times_ran += 1
    settings.cache.add(f"run{settings.times_ran}")
    settings.mapping = {**(settings.mapping or {}), "last_run": str(settings.times_ran)}
    if not settings.users:
        settings.users.append(User("Mika", 12))
    settings.save()

    print(f"Ran {settings.times_ran} time(s), users: {[u.name for u in settings.users]}")
    prefbind.dump()


if __name__ == "__main__":
    main()
