from typing import List, Optional

from .base import ApiSession, Store

TOP_SELLING_ROLES = ("admin", "manager")


class DashboardStore(Store):
    def __init__(self, api: ApiSession):
        super().__init__(api)
        self.summary: Optional[dict] = None
        self.low_stock: List[dict] = []
        self.recent_sales: List[dict] = []
        self.top_selling: List[dict] = []

    def fetch(self, user: Optional[dict] = None):
        """Carga las tarjetas del dashboard. Los más vendidos solo para admin/manager."""
        role = (user or {}).get("role")

        def call():
            self.summary = self.api.get("/api/dashboard/summary")["data"]
            self.low_stock = self.api.get("/api/dashboard/low-stock")["data"]
            self.recent_sales = self.api.get("/api/dashboard/recent-sales")["data"]
            if role in TOP_SELLING_ROLES:
                self.top_selling = self.api.get("/api/dashboard/top-selling")["data"]
            else:
                self.top_selling = []
            return self.summary

        return self._run("Fetch dashboard", call)
