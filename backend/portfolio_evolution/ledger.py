"""FIFO position ledger replayed against an advancing cutoff date."""
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Sequence

from .models import LAYER_EPSILON, AssetState, PositionLayer, Transaction

logger = logging.getLogger(__name__)


def asset_key(tx: Transaction) -> str:
    """Return the ledger key for a transaction.

    Fixed-income contributions are separate instruments (own rate and
    maturity), so they are keyed by transaction id instead of symbol.
    """

    category = tx.normalized_category
    if tx.is_fixed_income:
        return f"{category}_{tx.id}"
    return f"{category}_{tx.normalized_symbol}"


def apply_transaction(state: AssetState, tx: Transaction) -> None:
    """Apply a buy or sell to ``state`` using FIFO lot matching."""

    qty = tx.quantity
    if qty > 0:
        amount = tx.contribution_amount
        state.layers.append(
            PositionLayer(
                remaining_quantity=qty,
                unit_cost=amount / qty,
                acquisition_date=tx.date,
                original_amount=amount,
            )
        )
        return

    qty_to_close = abs(qty)
    layers = state.layers
    while qty_to_close > 0 and layers:
        lot = layers[0]
        close_qty = min(qty_to_close, lot.remaining_quantity)
        lot.remaining_quantity = max(lot.remaining_quantity - close_qty, 0.0)
        qty_to_close -= close_qty
        if lot.remaining_quantity <= LAYER_EPSILON:
            layers.popleft()
    if qty_to_close > LAYER_EPSILON:
        logger.warning(
            "Sell %s of %s/%s on %s exceeds held quantity by %.6f",
            tx.id,
            state.category,
            state.symbol,
            tx.date.isoformat(),
            qty_to_close,
        )


class PositionLedger:
    """Replays ordered transactions up to a monotonically advancing cutoff."""

    def __init__(self, transactions: Sequence[Transaction]):
        self._transactions: List[Transaction] = sorted(transactions, key=lambda tx: tx.date)
        self._index = 0
        self.assets: Dict[str, AssetState] = {}

    @property
    def consumed(self) -> int:
        return self._index

    def advance(self, cutoff: date) -> int:
        """Consume every pending transaction dated on or before ``cutoff``."""

        consumed = 0
        transactions = self._transactions
        while self._index < len(transactions) and transactions[self._index].date <= cutoff:
            tx = transactions[self._index]
            self._index += 1
            consumed += 1
            if not tx.is_valid:
                logger.warning(
                    "Skipping transaction %s for %s with invalid quantity %r",
                    tx.id,
                    tx.normalized_symbol,
                    tx.quantity,
                )
                continue
            key = asset_key(tx)
            state = self.assets.get(key)
            if state is None:
                state = AssetState.from_transaction(tx)
                self.assets[key] = state
            else:
                state.update_metadata(tx)
            apply_transaction(state, tx)
        return consumed


__all__ = ["PositionLedger", "apply_transaction", "asset_key"]
