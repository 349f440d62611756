from typing import List, Optional

from .base import ApiSession, Store

DEFAULT_FILTERS = {"search": "", "category": "", "sort": "-createdAt"}


class InventoryStore(Store):
    def __init__(self, api: ApiSession, limit: int = 10):
        super().__init__(api)
        self.items: List[dict] = []
        self.current_item: Optional[dict] = None
        self.filters = dict(DEFAULT_FILTERS)
        self.pagination = {"page": 1, "limit": limit, "total": 0, "pages": 0}

    # --- Listado ---
    def fetch(self):
        params = dict(self.filters, page=self.pagination["page"], limit=self.pagination["limit"])

        def call():
            res = self.api.get("/api/inventory/", params=params)
            self.items = res["data"]
            self.pagination = res["pagination"]
            return self.items

        return self._run("Fetch inventory", call)

    def set_filters(self, **filters):
        self.filters.update(filters)
        self.pagination["page"] = 1

    def set_page(self, page: int):
        self.pagination["page"] = page

    # --- Detalle ---
    def get(self, item_id: int):
        def call():
            self.current_item = self.api.get(f"/api/inventory/{item_id}")["data"]
            return self.current_item

        return self._run("Fetch inventory item", call)

    def clear_current_item(self):
        self.current_item = None

    # --- Altas / cambios / bajas ---
    def create(self, data: dict):
        def call():
            item = self.api.post("/api/inventory/", json=data)["data"]
            self.items.insert(0, item)
            return item

        return self._run("Create inventory item", call)

    def update(self, item_id: int, data: dict):
        def call():
            item = self.api.put(f"/api/inventory/{item_id}", json=data)["data"]
            self.items = [item if i["id"] == item_id else i for i in self.items]
            self.current_item = item
            return item

        return self._run("Update inventory item", call)

    def delete(self, item_id: int) -> bool:
        def call():
            self.api.delete(f"/api/inventory/{item_id}")
            self.items = [i for i in self.items if i["id"] != item_id]
            if self.current_item and self.current_item["id"] == item_id:
                self.current_item = None
            return True

        return self._run("Delete inventory item", call, failed=False)

    # --- Hojas de cálculo ---
    def export(self, format: str = "csv"):
        return self._run(
            "Export inventory",
            lambda: self.api.get("/api/inventory/export", params={"format": format}, raw=True),
        )

    def import_file(self, filename: str, content: bytes):
        result = self._run(
            "Import inventory",
            lambda: self.api.post("/api/inventory/import", files={"file": (filename, content)}),
        )
        if result is not None:
            self.fetch()
        return result
