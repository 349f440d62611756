from typing import List, Optional

from .base import ApiSession, Store


class SalesStore(Store):
    def __init__(self, api: ApiSession):
        super().__init__(api)
        self.sales: List[dict] = []
        self.sale: Optional[dict] = None
        self.pagination: Optional[dict] = None
        self.stats_data: Optional[dict] = None

    def fetch(self, page: int = 1, limit: int = 10, filters: Optional[dict] = None):
        params = dict(filters or {}, page=page, limit=limit)

        def call():
            res = self.api.get("/api/sales/", params=params)
            self.sales = res["data"]
            self.pagination = res["pagination"]
            return self.sales

        return self._run("Fetch sales", call)

    def get(self, sale_id: int):
        def call():
            self.sale = self.api.get(f"/api/sales/{sale_id}")["data"]
            return self.sale

        return self._run("Fetch sale", call)

    def create(self, data: dict):
        def call():
            sale = self.api.post("/api/sales/", json=data)["data"]
            self.sales.append(sale)
            return sale

        return self._run("Create sale", call)

    def update(self, sale_id: int, data: dict):
        def call():
            sale = self.api.put(f"/api/sales/{sale_id}", json=data)["data"]
            self.sales = [sale if s["id"] == sale_id else s for s in self.sales]
            self.sale = sale
            return sale

        return self._run("Update sale", call)

    def delete(self, sale_id: int) -> bool:
        def call():
            self.api.delete(f"/api/sales/{sale_id}")
            self.sales = [s for s in self.sales if s["id"] != sale_id]
            if self.sale and self.sale["id"] == sale_id:
                self.sale = None
            return True

        return self._run("Delete sale", call, failed=False)

    def stats(self, period: str = "month"):
        def call():
            self.stats_data = self.api.get("/api/sales/stats", params={"period": period})["data"]
            return self.stats_data

        return self._run("Fetch sales stats", call)

    def download_invoice(self, sale_id: int):
        """Devuelve los bytes del PDF de la factura."""
        return self._run("Download invoice", lambda: self.api.get(f"/api/sales/{sale_id}/invoice", raw=True))

    def filter_local(self, search: str = "", status: str = "") -> List[dict]:
        """Filtro sobre la página ya cargada (cliente o folio, y estatus)."""
        term = search.strip().lower()
        result = []
        for sale in self.sales:
            if status and sale.get("status") != status:
                continue
            if term:
                haystack = f"{sale.get('customer') or ''} {sale.get('invoiceNumber') or ''}".lower()
                if term not in haystack:
                    continue
            result.append(sale)
        return result
