from typing import List, Optional

from .base import ApiSession, Store


class UsersStore(Store):
    def __init__(self, api: ApiSession):
        super().__init__(api)
        self.users: List[dict] = []
        self.user: Optional[dict] = None
        self.pagination: Optional[dict] = None

    def fetch(self, page: int = 1, limit: int = 10, search: str = "", role: str = ""):
        params = {"page": page, "limit": limit, "search": search, "role": role}

        def call():
            res = self.api.get("/api/users/", params=params)
            self.users = res["data"]
            self.pagination = res["pagination"]
            return self.users

        return self._run("Fetch users", call)

    def get(self, user_id: int):
        def call():
            self.user = self.api.get(f"/api/users/{user_id}")["data"]
            return self.user

        return self._run("Fetch user", call)

    def create(self, data: dict):
        def call():
            user = self.api.post("/api/users/", json=data)["data"]
            self.users.append(user)
            return user

        return self._run("Create user", call)

    def update(self, user_id: int, data: dict):
        def call():
            user = self.api.put(f"/api/users/{user_id}", json=data)["data"]
            self.users = [user if u["id"] == user_id else u for u in self.users]
            self.user = user
            return user

        return self._run("Update user", call)

    def update_password(self, user_id: int, password: str):
        return self._run(
            "Update user password",
            lambda: self.api.put(f"/api/users/{user_id}/password", json={"password": password})["data"],
        )

    def delete(self, user_id: int) -> bool:
        def call():
            self.api.delete(f"/api/users/{user_id}")
            self.users = [u for u in self.users if u["id"] != user_id]
            return True

        return self._run("Delete user", call, failed=False)
