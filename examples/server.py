# /// script
# requires-python = ">=3.14"
# dependencies = [
#     "rou @ file:///${PROJECT_ROOT}/../rou",
#     "granian[uvloop]>=2.6.0,<3.0.0",
# ]
# ///
"""RSGI server demo.

Fully functional web server using Granian + rou Router.
"""

import asyncio
import json
import logging
import sqlite3
from json.decoder import JSONDecodeError

from granian.server.embed import Server

from rou import Context, Handler, Router, format_routes, require_headers

ADDRESS = "127.0.0.1"
PORT = 8000

_db = sqlite3.connect(":memory:")
_db.cursor().executescript("""
CREATE TABLE IF NOT EXISTS user (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL
);
""")


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    router = Router()
    router.get("/", home)
    router.get("/user", get_users(_db))
    router.get("/user/:id", get_user(_db))
    router.post("/user", create_user(_db)).middleware(
        require_headers("Authorization")
    )
    router.delete("/user/:id", delete_user(_db)).middleware(
        require_headers("Authorization")
    )
    router.finalize()
    print(format_routes(router.table))

    server = Server(router, address=ADDRESS, port=PORT, log_access=True)
    try:
        await server.serve()
    except asyncio.CancelledError:
        pass


async def home(ctx: Context) -> None:
    ctx.success_json("Welcome home")


# closure over handler to inject dependencies
def get_users(db: sqlite3.Connection) -> Handler:
    async def handler(ctx: Context) -> None:
        limit = ctx.query.get("limit", "100")
        cur = db.cursor()
        cur.execute("SELECT * FROM user LIMIT ?", (int(limit),))
        ctx.success_json([{"id": row[0], "name": row[1]} for row in cur.fetchall()])

    return handler


def get_user(db: sqlite3.Connection) -> Handler:
    async def handler(ctx: Context) -> None:
        try:
            user_id = int(ctx.params["id"])
        except ValueError:
            ctx.error_json(404, "Page not found")
            return
        cur = db.cursor()
        cur.execute("SELECT * FROM user WHERE id = ?", (user_id,))
        result = cur.fetchone()
        if result is None:
            ctx.error_json(404, "Page not found")
            return
        ctx.success_json({"id": result[0], "name": result[1]})

    return handler


def create_user(db: sqlite3.Connection) -> Handler:
    async def handler(ctx: Context) -> None:
        try:
            payload = json.loads(await ctx.body())
            name = payload["name"]
        except (JSONDecodeError, KeyError, TypeError):
            ctx.error_json(422, "Request body is not valid")
            return
        cur = db.cursor()
        cur.execute("INSERT INTO user (name) VALUES (?) RETURNING id", (name,))
        (user_id,) = cur.fetchone()
        db.commit()
        ctx.success_json({"id": user_id, "name": name})

    return handler


def delete_user(db: sqlite3.Connection) -> Handler:
    async def handler(ctx: Context) -> None:
        cur = db.cursor()
        cur.execute("DELETE FROM user WHERE id = ?", (ctx.params["id"],))
        db.commit()
        ctx.success_json(None)

    return handler


if __name__ == "__main__":
    asyncio.run(main())
