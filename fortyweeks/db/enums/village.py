"""Village and access request enums."""

from enum import Enum


class Relationship(str, Enum):
    MOTHER = "mother"
    FATHER = "father"
    SISTER = "sister"
    BROTHER = "brother"
    FRIEND = "friend"
    COWORKER = "coworker"
    GRANDPARENT = "grandparent"
    AUNT = "aunt"
    UNCLE = "uncle"
    COUSIN = "cousin"
    OTHER = "other"


RELATIONSHIP_LABELS = {
    Relationship.MOTHER.value: "Mother",
    Relationship.FATHER.value: "Father",
    Relationship.SISTER.value: "Sister",
    Relationship.BROTHER.value: "Brother",
    Relationship.FRIEND.value: "Friend",
    Relationship.COWORKER.value: "Coworker",
    Relationship.GRANDPARENT.value: "Grandparent",
    Relationship.AUNT.value: "Aunt",
    Relationship.UNCLE.value: "Uncle",
    Relationship.COUSIN.value: "Cousin",
    Relationship.OTHER.value: "Other",
}

DEFAULT_RELATIONSHIP_LABEL = "Family/Friend"


class AccessRequestStatus(str, Enum):
    """
    Lifecycle of a timeline access request.

    Resolved requests stay in the table for history; only PENDING rows
    are listed to the owner or block a repeat request.
    """

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class AccessRequestAction(str, Enum):
    APPROVE = "approve"
    DENY = "deny"
