"""
RWA Epoch — движок клиринга эпох для траншевых RWA пулов.

Чистая детерминированная библиотека вычислений: агрегация invest/redeem
ордеров, расчёт решения эпохи (epoch solution) и оценка пула
(NAV, reserve ratio, subordination, yield).
"""

__version__ = "0.1.0"
