from typing import AsyncContextManager, Callable

from sqlalchemy.ext.asyncio import AsyncSession
from typing_extensions import TypeAlias

AsyncDbSession: TypeAlias = AsyncSession
AsyncDbSessionFactory = Callable[[], AsyncContextManager[AsyncDbSession]]
