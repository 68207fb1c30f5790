"""
Tests for model mappings.
"""

from sqlalchemy import inspect, select

from renthub.database import Base
from renthub.models.image import ListingImage
from renthub.models.listing import Listing
from renthub.models.transaction import Transaction
from renthub.models.user import User
from renthub.repositories.listing import ListingRepository
from conftest import ListingFactory


class TestRelationships:
    """Relationship mappings."""

    def test_only_read_relationships_are_mapped(self):
        assert set(inspect(Listing).relationships.keys()) == {"owner", "images"}
        assert set(inspect(Transaction).relationships.keys()) == {"payer", "payee"}
        assert not inspect(User).relationships
        assert not inspect(ListingImage).relationships

    def test_no_relationship_uses_noload(self):
        for mapper in Base.registry.mappers:
            for relationship in mapper.relationships:
                assert relationship.lazy != "noload", f"{mapper.class_.__name__}.{relationship.key}"

    async def test_images_follow_their_listing(self, db_session, owner):
        repo = ListingRepository(db_session)
        data = ListingFactory.listing_data(owner_id=owner.id)
        image = ListingImage(
            url="/uploads/photo.png",
            public_id="photo.png",
            filename="photo.png",
            mime_type="image/png",
            file_size=128
        )

        listing = await repo.create_listing(data, images=[image])
        assert [stored.listing_id for stored in listing.images] == [listing.id]

        await repo.delete_listing(listing)

        remaining = await db_session.execute(select(ListingImage))
        assert remaining.scalars().all() == []
