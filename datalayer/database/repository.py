"""
Repository Base Class

Base class for every repository that needs access to a MongoDB collection.
It mediates document CRUD, mass-assignment protection (``fields``), read-side
projection hiding (``hidden``) and declarative validation (``rules``).

Usage::

    class UserRepository(Repository):
        fields = ["email", "name", "phone"]
        hidden = ["password"]
        rules = {"email": "required|email|unique", "name": "or:phone"}

        def __init__(self, get_database):
            super().__init__(get_database, "users")

    users = UserRepository(mongo.get_database)
    await users.validate(payload)
    user = await users.insert(payload)
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument

from config.loguru_config import get_logger
from datalayer.validation import (
    MISSING,
    VALIDATION_FAILED_MESSAGE,
    RuleHandler,
    RuleRegistry,
    ValidationError,
    ValidationFailure,
    Validator,
    default_registry,
    get_value,
)

from .interfaces.document_db_interface import (
    GuardedFieldsError,
    RepoMalformedError,
    RepositoryError,
)
from .rules import REPOSITORY_RULES

logger = get_logger(__name__)

Query = Union[Mapping, ObjectId, str]

UPDATED_AT = "updated_at"


def filter_fields(payload: Optional[Mapping], allow_list: Optional[Iterable[str]]) -> Dict[str, Any]:
    """Return a new dict holding only the keys of ``payload`` found in ``allow_list``."""
    if not payload or not allow_list:
        return {}
    allowed = set(allow_list)
    return {key: value for key, value in payload.items() if key in allowed}


def to_object_id(value: Union[ObjectId, str]) -> ObjectId:
    """Coerce an identifier to ``ObjectId``. Invalid values raise ``bson.errors.InvalidId``."""
    if isinstance(value, ObjectId):
        return value
    if value is None:
        raise InvalidId("None is not a valid ObjectId")
    return ObjectId(value)


class Repository:
    """
    Base class for MongoDB repositories.

    Subclasses declare:
    - ``fields``: keys a guarded write may set
    - ``hidden``: keys excluded from ``all``, ``find`` and ``find_by_id``
    - ``rules``: field to pipe-delimited rule list, used by ``validate``
    - ``custom_rules``: extra rule handlers, by name

    The connection accessor is called on every access and never cached, so
    it must be cheap; ``MongoDBClient.get_database`` is.
    """

    fields: ClassVar[List[str]] = []
    hidden: ClassVar[List[str]] = []
    rules: ClassVar[Optional[Dict[str, str]]] = None
    custom_rules: ClassVar[Dict[str, RuleHandler]] = {}

    def __init__(
        self,
        get_database: Callable[[], Any],
        collection_name: str,
        registry: Optional[RuleRegistry] = None
    ):
        """
        Args:
            get_database: Zero-argument callable returning the live database handle
            collection_name: Name of the collection this repository is bound to
            registry: Base rule registry, the built-in rules when omitted
        """
        if not get_database:
            raise RepoMalformedError("Missing the database accessor")

        if not callable(get_database):
            raise RepoMalformedError("The database accessor must be callable")

        if not collection_name:
            raise RepoMalformedError("Missing the collection name for this repository")

        self.collection_name = collection_name
        self.get_database = get_database
        self.errors: List[ValidationFailure] = []

        rule_registry = (registry if registry is not None else default_registry()).copy()
        rule_registry.update(REPOSITORY_RULES)
        rule_registry.update(self.custom_rules)
        self.registry = rule_registry
        self.validator = Validator(rule_registry)

    @property
    def db(self):
        """The database handle, resolved on each access."""
        return self.get_database()

    @property
    def collection(self):
        """The bound collection, resolved on each access."""
        return self.db.get_collection(self.collection_name)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def all(self) -> List[Dict[str, Any]]:
        """Get every document of the collection, hidden fields excluded."""
        return await self._find(self.collection, {}).to_list(length=None)

    async def count(self, query: Optional[Mapping] = None) -> int:
        """Count documents, all of them by default."""
        return await self.collection.count_documents(query or {})

    def find(self, query: Optional[Query] = None):
        """
        Find documents matching ``query``.

        Returns:
            AsyncIOMotorCursor: Lazy cursor, hidden fields excluded
        """
        return self._find(self.collection, self._to_query(query) if query is not None else {})

    async def find_one(self, query: Query) -> Optional[Dict[str, Any]]:
        """Retrieve the first full document matching ``query`` (no projection)."""
        return await self.collection.find_one(self._to_query(query))

    async def find_by_id(self, id: Union[ObjectId, str]) -> Optional[Dict[str, Any]]:
        """Retrieve one document by identifier, hidden fields excluded."""
        return await self._find_by_id(self.collection, id)

    async def get_field(self, id: Union[ObjectId, str], field_name: str) -> Any:
        """
        Get a single field of a document.

        Args:
            id: Document identifier
            field_name: Field to read

        Returns:
            Any: The field value, None when the document or field is missing
        """
        document = await self.collection.find_one(
            {"_id": to_object_id(id)},
            {field_name: 1, "_id": 0},
        )
        if document is None:
            return None
        value = get_value(document, field_name)
        return None if value is MISSING else value

    def hidden_projection(self) -> Dict[str, int]:
        """
        Build the exclusion projection from ``hidden``.

        To hide a field from every read, add it to ``hidden``. An empty
        result means no projection: all fields are returned.
        """
        return {field: 0 for field in (self.hidden or [])}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, data: Mapping, no_guard: bool = False) -> Dict[str, Any]:
        """
        Add one document to the collection.

        Args:
            data: Document to add
            no_guard: Lift mass-assignment protection and store ``data`` as is

        Returns:
            Dict[str, Any]: The stored document, including its ``_id``

        Raises:
            GuardedFieldsError: If nothing is left to save after guarding
        """
        return await self._insert(self.collection, data, no_guard=no_guard)

    async def update(
        self,
        query: Query,
        replace: Mapping,
        update_time: bool = True,
        no_guard: bool = False
    ) -> Optional[Dict[str, Any]]:
        """
        Set fields on the first document matching ``query``, inserting it if missing.

        Args:
            query: Filter or identifier
            replace: Fields to set
            update_time: Refresh ``updated_at``
            no_guard: Lift mass-assignment protection

        Returns:
            Dict[str, Any]: The document after the update

        Raises:
            GuardedFieldsError: If no allow-listed field is left to set
        """
        return await self._update(self.collection, query, replace, update_time=update_time, no_guard=no_guard)

    async def full_update(
        self,
        query: Query,
        replace: Mapping,
        update_time: bool = True
    ) -> Optional[Dict[str, Any]]:
        """
        Replace the whole body of the first document matching ``query``.

        No field guarding is applied. ``updated_at`` is overwritten with the
        current time unless ``update_time`` is False, in which case the
        caller's value is stored as given. Returns the document after
        replacement, None when nothing matched.
        """
        document = {key: value for key, value in (replace or {}).items() if key != "_id"}
        if update_time:
            document[UPDATED_AT] = datetime.now(timezone.utc)

        return await self.collection.find_one_and_replace(
            self._to_query(query),
            document,
            return_document=ReturnDocument.AFTER,
        )

    async def unset(self, query: Query, field: str) -> Optional[Dict[str, Any]]:
        """Remove ``field`` from the first document matching ``query``."""
        return await self.collection.find_one_and_update(
            self._to_query(query),
            {"$unset": {field: ""}},
            return_document=ReturnDocument.AFTER,
        )

    async def push_to_array(
        self,
        query: Query,
        value: Any,
        field_name: str,
        update_time: bool = True
    ) -> Optional[Dict[str, Any]]:
        """
        Append ``value`` to the array ``field_name`` of the first matching document.

        Returns:
            Dict[str, Any]: The document after the update
        """
        return await self._push_to_array(self.collection, query, value, field_name, update_time)

    async def pull_from_array(
        self,
        query: Query,
        removal_query: Any,
        field_name: str
    ) -> Optional[Dict[str, Any]]:
        """
        Remove the elements matching ``removal_query`` from the array ``field_name``.

        Returns:
            Dict[str, Any]: The document after the update
        """
        return await self.collection.find_one_and_update(
            self._to_query(query),
            {
                "$pull": {field_name: removal_query},
                "$currentDate": {UPDATED_AT: True},
            },
            sort=[("_id", ASCENDING)],
            return_document=ReturnDocument.AFTER,
        )

    async def remove(self, query: Optional[Query] = None, just_one: bool = False) -> int:
        """
        Remove the documents matching ``query``; every document when no query is given.

        Returns:
            int: Number of deleted documents
        """
        return await self._remove(self.collection, self._to_query(query) if query is not None else {}, just_one)

    async def remove_by_id(self, id: Union[ObjectId, str], just_one: bool = False) -> int:
        """Remove a document by identifier."""
        return await self._remove(self.collection, {"_id": to_object_id(id)}, just_one)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def validate(
        self,
        data: Optional[Mapping] = None,
        exclude: Optional[Iterable[str]] = None,
        rules_override: Optional[Dict[str, str]] = None
    ) -> bool:
        """
        Validate a payload against the repository rules.

        Args:
            data: Payload to validate
            exclude: Fields dropped from the rule set entirely, e.g. ``["email"]``
                to skip the unique check when updating a resource in place
            rules_override: Rule set used instead of ``rules``

        Returns:
            bool: True when every rule passes

        Raises:
            RepositoryError: If no rule set is available
            ValidationError: status 422, ``meta`` holding the formatted errors
            ValidationInfrastructureError: If a rule could not be evaluated
        """
        self.errors = []

        rules = rules_override if rules_override is not None else self.rules
        if rules is None:
            raise RepositoryError("No validation rule are present on the model")

        excluded = set(exclude or [])
        active_rules = {field: spec for field, spec in rules.items() if field not in excluded}

        failures = await self.validator.validate_all(data, active_rules, owner=self)
        if not failures:
            return True

        self.errors = failures
        logger.debug(f"{type(self).__name__} validation failed on {sorted({f.field for f in failures})}")
        raise ValidationError(VALIDATION_FAILED_MESSAGE, status=422, meta=self.format_errors())

    def format_errors(self) -> Dict[str, List[str]]:
        """Group the last validation failures by field, keeping rule order."""
        formatted: Dict[str, List[str]] = {}
        for failure in self.errors:
            formatted.setdefault(failure.field, []).append(failure.message)
        return formatted

    # ------------------------------------------------------------------
    # Collection-targeted helpers
    # ------------------------------------------------------------------

    def _to_query(self, query: Query) -> Mapping:
        if isinstance(query, Mapping):
            return query
        return {"_id": to_object_id(query)}

    def _find(self, collection, query: Mapping, projection: Optional[Dict[str, int]] = None):
        if projection is None:
            projection = self.hidden_projection()
        # pymongo reads an empty projection as "_id only"
        return collection.find(query, projection or None)

    async def _find_by_id(self, collection, id: Union[ObjectId, str]) -> Optional[Dict[str, Any]]:
        return await collection.find_one({"_id": to_object_id(id)}, self.hidden_projection() or None)

    async def _insert(
        self,
        collection,
        data: Mapping,
        fields_override: Optional[List[str]] = None,
        no_guard: bool = False
    ) -> Dict[str, Any]:
        """
        Insert into the given collection.

        ``fields_override`` replaces ``fields`` when the target collection is
        not the repository's own.
        """
        fields = fields_override if fields_override is not None else self.fields
        document = dict(data or {}) if no_guard else filter_fields(data, fields)

        if not document:
            message = (
                f"Can not save resources, either {type(self).__name__} repository was not "
                f"specified a 'fields' property either no data was passed"
            )
            logger.warning(message)
            raise GuardedFieldsError(message, collection=self.collection_name)

        result = await collection.insert_one(document)
        inserted_id = getattr(result, "inserted_id", None)
        if inserted_id is None:
            raise RepositoryError("Response could not be parsed", collection=self.collection_name)

        document["_id"] = inserted_id
        return document

    async def _update(
        self,
        collection,
        query: Query,
        replace: Mapping,
        update_time: bool = True,
        fields_override: Optional[List[str]] = None,
        no_guard: bool = False
    ) -> Optional[Dict[str, Any]]:
        fields = fields_override if fields_override is not None else self.fields
        payload = dict(replace or {}) if no_guard else filter_fields(replace, fields)

        # the server-managed timestamp always wins
        payload.pop(UPDATED_AT, None)

        if not payload and not no_guard:
            message = (
                f"Can not update resources, either {type(self).__name__} repository was not "
                f"specified a 'fields' property either no allowed field was passed"
            )
            logger.warning(message)
            raise GuardedFieldsError(message, collection=self.collection_name)

        update: Dict[str, Any] = {}
        if payload:
            update["$set"] = payload
        if update_time:
            update["$currentDate"] = {UPDATED_AT: True}

        if not update:
            message = f"Can not update resources, nothing left to write for {type(self).__name__} repository"
            logger.warning(message)
            raise GuardedFieldsError(message, collection=self.collection_name)

        return await collection.find_one_and_update(
            self._to_query(query),
            update,
            sort=[("_id", ASCENDING)],
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    async def _remove(self, collection, query: Mapping, just_one: bool = False) -> int:
        if just_one:
            result = await collection.delete_one(query)
        else:
            result = await collection.delete_many(query)
        return result.deleted_count

    async def _push_to_array(
        self,
        collection,
        query: Query,
        value: Any,
        field_name: str,
        update_time: bool = True
    ) -> Optional[Dict[str, Any]]:
        update: Dict[str, Any] = {"$push": {field_name: value}}
        if update_time:
            update["$currentDate"] = {UPDATED_AT: True}

        return await collection.find_one_and_update(
            self._to_query(query),
            update,
            sort=[("_id", ASCENDING)],
            return_document=ReturnDocument.AFTER,
        )
