# interfaces/storage.py
"""
Persistence layer for catalog products, recommendations, session requests,
wishlists and share links. Backed by SQLModel; every method runs in its own
short-lived session so one failed write never poisons the next.
"""

import uuid
from typing import Optional, List, Dict, Any, Iterable
from sqlalchemy import func
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select
from loguru import logger

from giftai.schemas.tables import (
    GiftProduct,
    GiftRecommendation,
    SessionRequest,
    WishlistItem,
    SharedWishlist,
)


def make_engine(database_url: str):
    """Create an engine; SQLite gets thread-safe settings for FastAPI"""
    if database_url.startswith("sqlite"):
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


class GiftStorage:
    """
    Repository over the GiftAI tables.
    Returned objects are detached copies (expire_on_commit=False).
    """

    def __init__(self, database_url: str = "sqlite://", engine=None):
        self.engine = engine or make_engine(database_url)

    def init_db(self):
        SQLModel.metadata.create_all(self.engine)
        logger.info("GiftStorage: tables ready")

    def _session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    # ============================================
    # Gift Products
    # ============================================

    def create_product(self, product: GiftProduct) -> GiftProduct:
        with self._session() as session:
            session.add(product)
            session.commit()
            session.refresh(product)
            return product

    def get_product(self, product_id: str) -> Optional[GiftProduct]:
        with self._session() as session:
            return session.get(GiftProduct, product_id)

    def get_products(self, product_ids: Iterable[str]) -> Dict[str, GiftProduct]:
        ids = [pid for pid in set(product_ids) if pid]
        if not ids:
            return {}
        with self._session() as session:
            rows = session.exec(select(GiftProduct).where(GiftProduct.id.in_(ids))).all()
            return {p.id: p for p in rows}

    def list_products(
        self,
        source: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None
    ) -> List[GiftProduct]:
        with self._session() as session:
            query = select(GiftProduct)
            if source:
                query = query.where(GiftProduct.source == source)
            if category:
                query = query.where(GiftProduct.category == category)
            if min_price is not None:
                query = query.where(GiftProduct.price_max >= min_price)
            if max_price is not None:
                query = query.where(GiftProduct.price_min <= max_price)
            return list(session.exec(query).all())

    def count_products(self, source: Optional[str] = None) -> int:
        with self._session() as session:
            query = select(func.count()).select_from(GiftProduct)
            if source:
                query = query.where(GiftProduct.source == source)
            return session.exec(query).one()

    # ============================================
    # Recommendations
    # ============================================

    def create_recommendation(self, recommendation: GiftRecommendation) -> GiftRecommendation:
        with self._session() as session:
            session.add(recommendation)
            session.commit()
            session.refresh(recommendation)
            return recommendation

    def get_recommendation(self, recommendation_id: str) -> Optional[GiftRecommendation]:
        with self._session() as session:
            return session.get(GiftRecommendation, recommendation_id)

    def get_recommendations_by_session(self, session_id: str) -> List[GiftRecommendation]:
        """Recommendations of a session in creation order"""
        with self._session() as session:
            query = (
                select(GiftRecommendation)
                .where(GiftRecommendation.session_id == session_id)
                .order_by(GiftRecommendation.created_at)
            )
            return list(session.exec(query).all())

    def update_personalized_message(self, recommendation_id: str, message: str) -> Optional[GiftRecommendation]:
        with self._session() as session:
            recommendation = session.get(GiftRecommendation, recommendation_id)
            if not recommendation:
                return None
            recommendation.personalized_message = message
            session.add(recommendation)
            session.commit()
            session.refresh(recommendation)
            return recommendation

    # ============================================
    # Session Requests
    # ============================================

    def save_session_request(self, record: SessionRequest) -> SessionRequest:
        with self._session() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            logger.info(f"Saved request facts for session {record.session_id}")
            return record

    def get_session_request(self, session_id: str) -> Optional[SessionRequest]:
        with self._session() as session:
            return session.get(SessionRequest, session_id)

    # ============================================
    # Wishlist
    # ============================================

    def add_to_wishlist(self, item: WishlistItem) -> WishlistItem:
        with self._session() as session:
            session.add(item)
            session.commit()
            session.refresh(item)
            return item

    def get_wishlist_by_session(self, session_id: str) -> List[WishlistItem]:
        with self._session() as session:
            query = (
                select(WishlistItem)
                .where(WishlistItem.session_id == session_id)
                .order_by(WishlistItem.created_at)
            )
            return list(session.exec(query).all())

    def remove_from_wishlist(self, item_id: str) -> bool:
        with self._session() as session:
            item = session.get(WishlistItem, item_id)
            if not item:
                return False
            session.delete(item)
            session.commit()
            return True

    def wishlist_save_counts(self) -> Dict[str, int]:
        """product_id -> number of wishlist saves"""
        with self._session() as session:
            query = (
                select(WishlistItem.product_id, func.count())
                .where(WishlistItem.product_id.is_not(None))
                .group_by(WishlistItem.product_id)
            )
            return {product_id: count for product_id, count in session.exec(query).all()}

    # ============================================
    # Shared Wishlists
    # ============================================

    def create_shared_wishlist(
        self,
        session_id: str,
        title: str = "My Gift Wishlist",
        description: Optional[str] = None
    ) -> SharedWishlist:
        shared = SharedWishlist(
            share_token=uuid.uuid4().hex[:8],
            session_id=session_id,
            title=title,
            description=description,
        )
        with self._session() as session:
            session.add(shared)
            session.commit()
            session.refresh(shared)
            logger.info(f"Created share link {shared.share_token} for session {session_id}")
            return shared

    def get_shared_wishlist(self, token: str) -> Optional[SharedWishlist]:
        with self._session() as session:
            query = select(SharedWishlist).where(SharedWishlist.share_token == token)
            return session.exec(query).first()

    def increment_view_count(self, shared_id: str) -> Optional[SharedWishlist]:
        with self._session() as session:
            shared = session.get(SharedWishlist, shared_id)
            if not shared:
                return None
            shared.view_count += 1
            session.add(shared)
            session.commit()
            session.refresh(shared)
            return shared
