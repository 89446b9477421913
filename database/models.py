import secrets
import string
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Table
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def gen_uuid_str():
    return str(uuid4())


def get_current_time():
    """Obtiene la hora actual (naive) en la zona horaria local configurada."""
    from utils.datetime_utils import get_naive_now
    return get_naive_now()


#tablas de asociación muchos-a-muchos
user_has_user_group = Table(
    "user_has_user_group",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("user_group_id", String(36), ForeignKey("user_groups.id", ondelete="CASCADE"), primary_key=True),
)

api_key_has_user_group = Table(
    "api_key_has_user_group",
    Base.metadata,
    Column("api_key_id", String(36), ForeignKey("api_keys.id", ondelete="CASCADE"), primary_key=True),
    Column("user_group_id", String(36), ForeignKey("user_groups.id", ondelete="CASCADE"), primary_key=True),
)


#ORM: Roles
class RoleORM(Base):
    __tablename__ = "roles"
    #el id es el nombre del rol, p.ej. ROLE_ADMIN
    id = Column(String(255), primary_key=True)
    description = Column(Text, nullable=False)

    user_groups = relationship("UserGroupORM", back_populates="role")


#ORM: Grupos de usuarios
class UserGroupORM(Base):
    __tablename__ = "user_groups"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    name = Column(String(255), nullable=False)
    role_id = Column(String(255), ForeignKey("roles.id"), nullable=False)
    #auditoría
    created_by = Column(String(36), nullable=True)
    updated_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=get_current_time)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time)

    role = relationship("RoleORM", back_populates="user_groups", lazy="joined")
    users = relationship("UserORM", secondary=user_has_user_group, back_populates="user_groups")
    api_keys = relationship("ApiKeyORM", secondary=api_key_has_user_group, back_populates="user_groups")


#ORM: Usuarios
class UserORM(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    username = Column(String(255), nullable=False, unique=True)
    firstname = Column(String(255), nullable=False)
    surname = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)
    #auditoría
    created_by = Column(String(36), nullable=True)
    updated_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=get_current_time)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time)

    user_groups = relationship(
        "UserGroupORM",
        secondary=user_has_user_group,
        back_populates="users",
        order_by="UserGroupORM.name",
    )

    @property
    def roles(self) -> list[str]:
        """Roles asignados directamente a través de los grupos del usuario."""
        return sorted({group.role_id for group in self.user_groups})

    def set_plain_password(self, password: str) -> None:
        """Guarda el hash bcrypt de la contraseña en claro."""
        from core.security import hash_password
        self.password = hash_password(password)


#ORM: API keys
class ApiKeyORM(Base):
    __tablename__ = "api_keys"
    id = Column(String(36), primary_key=True, default=gen_uuid_str)
    token = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    #auditoría
    created_by = Column(String(36), nullable=True)
    updated_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=get_current_time)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time)

    user_groups = relationship(
        "UserGroupORM",
        secondary=api_key_has_user_group,
        back_populates="api_keys",
        order_by="UserGroupORM.name",
    )

    @staticmethod
    def generate_token(length: int = 40) -> str:
        """Genera un token aleatorio de caracteres alfanuméricos."""
        alphabet = string.ascii_letters + string.digits
        return "".join(secrets.choice(alphabet) for _ in range(length))

    @property
    def roles(self) -> list[str]:
        """ROLE_API más los roles de los grupos asignados a la key."""
        from core.security import ROLE_API
        return sorted({ROLE_API} | {group.role_id for group in self.user_groups})


__all__ = [
    "Base",
    "RoleORM",
    "UserGroupORM",
    "UserORM",
    "ApiKeyORM",
    "user_has_user_group",
    "api_key_has_user_group",
]
