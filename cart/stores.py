"""Cart storage backends.

A shopper's cart is either a guest cart, kept as one JSON list in the
Django cache under the guest token, or an account cart persisted as
`CartItem` rows. Both expose the same `CartStore` interface so views and
checkout never branch on the owner type.
"""

import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Optional

from catalog.selectors import get_sellable
from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models import F

from .models import Cart, CartItem

logger = logging.getLogger("manicvanity.cart")

GUEST_TOKEN_HEADER = "X-Guest-Token"
GUEST_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


class CartError(Exception):
    """Raised for cart mutation failures."""


class CartLineNotFound(CartError):
    pass


@dataclass(frozen=True)
class CartLine:
    line_id: str
    product_id: int
    variant_id: Optional[int]
    quantity: int
    name: str
    unit_price_cents: int

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def as_dict(self) -> dict:
        data = asdict(self)
        data["line_total_cents"] = self.line_total_cents
        return data


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise CartError("Quantity must be a positive integer")
    return quantity


def _resolve(product_id, variant_id):
    product, variant = get_sellable(product_id, variant_id)
    if product is None:
        raise CartError("Product not found")
    name = f"{product.name} - {variant.name}" if variant is not None else product.name
    price = variant.unit_price_cents if variant is not None else product.price_cents
    return product, variant, name, price


class CartStore(ABC):
    """Common contract for guest and account carts."""

    guest = False

    @abstractmethod
    def lines(self) -> list[CartLine]:
        raise NotImplementedError

    @abstractmethod
    def add_line(self, product_id: int, variant_id: Optional[int] = None, quantity: int = 1) -> CartLine:
        """Add a line or increment the existing line for (product, variant)."""
        raise NotImplementedError

    @abstractmethod
    def set_quantity(self, line_id: str, quantity: int) -> Optional[CartLine]:
        """Replace a line's quantity; `quantity <= 0` removes it and returns None."""
        raise NotImplementedError

    @abstractmethod
    def remove_line(self, line_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError

    def subtotal(self) -> int:
        return sum(line.line_total_cents for line in self.lines())

    def _log(self, event: str, **fields) -> None:
        logger.info(event, extra={"event": event, "guest": self.guest, **fields})


class GuestCartStore(CartStore):
    """Cart held in the cache for an anonymous shopper.

    Every mutation rewrites the whole list and refreshes the TTL.
    """

    guest = True

    def __init__(self, token: str):
        if not token or not GUEST_TOKEN_RE.match(token):
            raise CartError("Invalid guest token")
        self.token = token

    @property
    def key(self) -> str:
        return f"cart:guest:{self.token}"

    def _load(self) -> list[dict]:
        return list(cache.get(self.key) or [])

    def _save(self, raw: list[dict]) -> None:
        cache.set(self.key, raw, timeout=settings.GUEST_CART_TTL_SECONDS)

    def lines(self) -> list[CartLine]:
        return [CartLine(**entry) for entry in self._load()]

    def add_line(self, product_id, variant_id=None, quantity=1):
        quantity = _validate_quantity(quantity)
        product, variant, name, price = _resolve(product_id, variant_id)
        variant_pk = variant.id if variant is not None else None

        raw = self._load()
        for entry in raw:
            if entry["product_id"] == product.id and entry["variant_id"] == variant_pk:
                entry["quantity"] += quantity
                self._save(raw)
                self._log("cart.item_updated", token=self.token, line_id=entry["line_id"], quantity=entry["quantity"])
                return CartLine(**entry)

        entry = {
            "line_id": uuid.uuid4().hex,
            "product_id": product.id,
            "variant_id": variant_pk,
            "quantity": quantity,
            "name": name,
            "unit_price_cents": price,
        }
        raw.append(entry)
        self._save(raw)
        self._log("cart.item_added", token=self.token, line_id=entry["line_id"], quantity=quantity)
        return CartLine(**entry)

    def set_quantity(self, line_id, quantity):
        raw = self._load()
        for index, entry in enumerate(raw):
            if entry["line_id"] != line_id:
                continue
            if quantity <= 0:
                del raw[index]
                self._save(raw)
                self._log("cart.item_removed", token=self.token, line_id=line_id)
                return None
            entry["quantity"] = quantity
            self._save(raw)
            self._log("cart.item_updated", token=self.token, line_id=line_id, quantity=quantity)
            return CartLine(**entry)
        raise CartLineNotFound(line_id)

    def remove_line(self, line_id):
        raw = self._load()
        kept = [entry for entry in raw if entry["line_id"] != line_id]
        if len(kept) != len(raw):
            self._save(kept)
            self._log("cart.item_removed", token=self.token, line_id=line_id)

    def clear(self):
        cache.delete(self.key)
        self._log("cart.cleared", token=self.token)

    def take(self) -> list[CartLine]:
        """Return the guest lines and delete them from the cache.

        Only the caller whose delete actually removed the key gets the lines,
        so concurrent merges with the same token apply at most once.
        """
        current = self.lines()
        if not current:
            return []
        if cache.delete(self.key) is False:
            return []
        return current


class AccountCartStore(CartStore):
    """Cart persisted as rows of the user's active `Cart`."""

    def __init__(self, user):
        self.user = user
        self._cart = None

    @property
    def cart(self) -> Cart:
        if self._cart is None:
            self._cart, _ = Cart.objects.get_or_create(user=self.user, status=Cart.STATUS_ACTIVE)
        return self._cart

    @staticmethod
    def _to_line(item: CartItem) -> CartLine:
        if item.variant_id is not None:
            price = item.variant.unit_price_cents
            name = f"{item.product.name} - {item.variant.name}"
        else:
            price = item.product.price_cents
            name = item.product.name
        return CartLine(
            line_id=str(item.id),
            product_id=item.product_id,
            variant_id=item.variant_id,
            quantity=int(item.quantity),
            name=name,
            unit_price_cents=price,
        )

    def _items(self):
        return CartItem.objects.filter(cart=self.cart).select_related("product", "variant", "variant__product")

    def _get_item(self, line_id) -> CartItem:
        try:
            return self._items().get(id=int(line_id))
        except (CartItem.DoesNotExist, ValueError, TypeError):
            raise CartLineNotFound(line_id)

    def lines(self):
        return [self._to_line(item) for item in self._items()]

    @transaction.atomic
    def add_line(self, product_id, variant_id=None, quantity=1):
        quantity = _validate_quantity(quantity)
        product, variant, name, price = _resolve(product_id, variant_id)

        item = CartItem.objects.select_for_update().filter(cart=self.cart, product=product, variant=variant).first()
        if item is not None:
            item.quantity = F("quantity") + quantity
            item.name = name
            item.unit_price_cents = price
            item.save(update_fields=["quantity", "name", "unit_price_cents", "updated_at"])
            event = "cart.item_updated"
        else:
            item = CartItem.objects.create(
                cart=self.cart,
                product=product,
                variant=variant,
                quantity=quantity,
                name=name,
                unit_price_cents=price,
            )
            event = "cart.item_added"
        item = self._get_item(item.id)
        self._log(event, cart_id=self.cart.id, user_id=self.user.id, line_id=str(item.id), quantity=item.quantity)
        return self._to_line(item)

    @transaction.atomic
    def set_quantity(self, line_id, quantity):
        item = self._get_item(line_id)
        if quantity <= 0:
            item.delete()
            self._log("cart.item_removed", cart_id=self.cart.id, user_id=self.user.id, line_id=str(line_id))
            return None
        item.quantity = quantity
        item.save(update_fields=["quantity", "updated_at"])
        self._log("cart.item_updated", cart_id=self.cart.id, user_id=self.user.id, line_id=str(line_id), quantity=quantity)
        return self._to_line(item)

    def remove_line(self, line_id):
        try:
            pk = int(line_id)
        except (TypeError, ValueError):
            return
        deleted, _ = CartItem.objects.filter(cart=self.cart, id=pk).delete()
        if deleted:
            self._log("cart.item_removed", cart_id=self.cart.id, user_id=self.user.id, line_id=str(line_id))

    def clear(self):
        CartItem.objects.filter(cart=self.cart).delete()
        self._log("cart.cleared", cart_id=self.cart.id, user_id=self.user.id)


def get_cart_store(request) -> CartStore:
    """Select the cart for this request: account when signed in, else guest."""
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return AccountCartStore(user)
    token = request.headers.get(GUEST_TOKEN_HEADER)
    if token:
        return GuestCartStore(token)
    raise CartError(f"Sign in or send an {GUEST_TOKEN_HEADER} header")
