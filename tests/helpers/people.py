"""Sample entity and repositories used across repository tests."""

from mongo_repository import AsyncMongoDbRepository, MongoDbItem, MongoDbRepository


class Person(MongoDbItem):
    name: str = ""
    surname: str = ""


class PersonRepository(MongoDbRepository[Person]):
    entity_type = Person


class AsyncPersonRepository(AsyncMongoDbRepository[Person]):
    entity_type = Person
