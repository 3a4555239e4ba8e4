"""Create, update, remove and icon removal."""

import uuid

import pytest
from pydantic import ValidationError

from notetree.domains.documents import (
    DocumentCreate,
    DocumentNotFoundError,
    DocumentUpdate,
    NotAuthenticatedError,
    UnauthorizedError,
)

from conftest import ALICE, BOB


@pytest.mark.asyncio
async def test_create_document_defaults(service):
    doc = await service.create_document(DocumentCreate(title="  Notes  "), ALICE)

    assert doc.title == "Notes"
    assert doc.user_id == ALICE
    assert doc.parent_document is None
    assert doc.is_archived is False
    assert doc.is_published is False
    assert doc.content is None


def test_create_requires_title():
    with pytest.raises(ValidationError):
        DocumentCreate()


def test_create_rejects_blank_title():
    with pytest.raises(ValidationError):
        DocumentCreate(title="   ")


@pytest.mark.asyncio
async def test_create_requires_identity(service):
    with pytest.raises(NotAuthenticatedError):
        await service.create_document(DocumentCreate(title="Anon"), None)


@pytest.mark.asyncio
async def test_create_under_foreign_parent_is_rejected(service, create_doc):
    bobs = await create_doc("Bob's", user_id=BOB)

    with pytest.raises(UnauthorizedError):
        await service.create_document(DocumentCreate(title="Sneaky", parent_document=bobs.id), ALICE)
    with pytest.raises(DocumentNotFoundError):
        await service.create_document(DocumentCreate(title="Lost", parent_document=uuid.uuid4()), ALICE)


@pytest.mark.asyncio
async def test_update_patches_only_given_fields(service, create_doc):
    doc = await create_doc("Draft")
    await service.update_document(doc.id, DocumentUpdate(content="body", icon="📄"), ALICE)

    updated = await service.update_document(doc.id, DocumentUpdate(title="Final"), ALICE)

    assert updated.title == "Final"
    assert updated.content == "body"
    assert updated.icon == "📄"
    assert updated.is_published is False


@pytest.mark.asyncio
async def test_update_ignores_null_title(service, create_doc):
    doc = await create_doc("Keep me")

    updated = await service.update_document(
        doc.id, DocumentUpdate(title=None, cover_image="https://img.example/cover.png"), ALICE
    )

    assert updated.title == "Keep me"
    assert updated.cover_image == "https://img.example/cover.png"


@pytest.mark.asyncio
async def test_remove_icon(service, create_doc):
    doc = await create_doc("Iconic")
    await service.update_document(doc.id, DocumentUpdate(icon="🔥"), ALICE)

    updated = await service.remove_icon(doc.id, ALICE)

    assert updated.icon is None
    assert updated.title == "Iconic"


@pytest.mark.asyncio
async def test_remove_does_not_cascade(service, repository, create_doc):
    parent = await create_doc("Parent")
    child = await create_doc("Child", parent=parent)

    removed = await service.remove_document(parent.id, ALICE)

    assert removed.id == parent.id
    assert await repository.get_by_id(parent.id) is None

    orphan = await service.get_document(child.id, ALICE)
    assert orphan.parent_document == parent.id
    assert [doc.id for doc in await service.get_search(ALICE)] == [child.id]
    assert await service.get_sidebar(ALICE) == []


@pytest.mark.asyncio
async def test_remove_missing_document(service):
    with pytest.raises(DocumentNotFoundError):
        await service.remove_document(uuid.uuid4(), ALICE)


@pytest.mark.asyncio
async def test_mutations_are_isolated_between_owners(service, repository, create_doc):
    doc = await create_doc("Alice's")

    with pytest.raises(UnauthorizedError):
        await service.update_document(doc.id, DocumentUpdate(title="Mine now"), BOB)
    with pytest.raises(UnauthorizedError):
        await service.remove_icon(doc.id, BOB)
    with pytest.raises(UnauthorizedError):
        await service.remove_document(doc.id, BOB)
    with pytest.raises(UnauthorizedError):
        await service.archive_document(doc.id, BOB)
    with pytest.raises(UnauthorizedError):
        await service.restore_document(doc.id, BOB)

    unchanged = await repository.get_by_id(doc.id)
    assert unchanged.title == "Alice's"
    assert unchanged.is_archived is False


@pytest.mark.asyncio
async def test_mutations_require_identity(service, create_doc):
    doc = await create_doc("Doc")

    with pytest.raises(NotAuthenticatedError):
        await service.update_document(doc.id, DocumentUpdate(title="x"), None)
    with pytest.raises(NotAuthenticatedError):
        await service.remove_icon(doc.id, None)
    with pytest.raises(NotAuthenticatedError):
        await service.remove_document(doc.id, None)


@pytest.mark.asyncio
async def test_update_of_concurrently_removed_document(service, create_doc, removed_before_patch):
    doc = await create_doc("Vanishing")
    removed_before_patch(service.document_repository)

    with pytest.raises(DocumentNotFoundError):
        await service.update_document(doc.id, DocumentUpdate(title="Too late"), ALICE)


@pytest.mark.asyncio
async def test_remove_icon_of_concurrently_removed_document(service, create_doc, removed_before_patch):
    doc = await create_doc("Vanishing")
    removed_before_patch(service.document_repository)

    with pytest.raises(DocumentNotFoundError):
        await service.remove_icon(doc.id, ALICE)
