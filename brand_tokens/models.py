# brand_tokens/models.py
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


def _iso(dt):
    return dt.isoformat() if dt else None


class Role(db.Model):
    __tablename__ = 'Role'
    Id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    Name = db.Column(db.String(50), unique=True, nullable=False)  # Viewer|Editor|Admin|SuperAdmin


class User(db.Model):
    __tablename__ = 'User'
    Id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    Username = db.Column(db.String(100), unique=True, nullable=False)
    PasswordHash = db.Column(db.String(255), nullable=False)
    Email = db.Column(db.String(255), unique=True, nullable=False)
    Name = db.Column(db.String(255), nullable=True)
    RoleId = db.Column(db.Integer, db.ForeignKey('Role.Id'), nullable=False)
    role_rel = db.relationship('Role', backref=db.backref('user_rel', lazy='dynamic'))


class Client(db.Model):
    __tablename__ = 'Client'
    Id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    Name = db.Column(db.String(255), nullable=False)
    CreatedAt = db.Column(db.DateTime, nullable=False, default=utcnow)
    UpdatedAt = db.Column(db.DateTime, nullable=False, default=utcnow)
    version_rel = db.relationship('DesignSystemVersion', backref='client', lazy='dynamic')


class DesignSystemVersion(db.Model):
    __tablename__ = 'DesignSystemVersion'
    Id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    ClientId = db.Column(db.Integer, db.ForeignKey('Client.Id'), nullable=False, index=True)
    UserId = db.Column(db.Integer, db.ForeignKey('User.Id'), nullable=False)
    VersionName = db.Column(db.String(255), nullable=True)
    Description = db.Column(db.Text, nullable=True)
    RawTokens = db.Column(db.JSON, nullable=False)
    SemanticTokens = db.Column(db.JSON, nullable=False)
    ChangesSummary = db.Column(db.JSON, nullable=True)
    # Rollback lineage; always points at an earlier version of the same client.
    ParentVersionId = db.Column(db.Integer, db.ForeignKey('DesignSystemVersion.Id'), nullable=True)
    IsSnapshot = db.Column(db.Boolean, nullable=False, default=False)
    FigmaConnectionId = db.Column(db.Integer, nullable=True)
    SyncLogId = db.Column(db.Integer, nullable=True)
    CreatedAt = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    change_rel = db.relationship('DesignSystemChange', backref='version', lazy='dynamic',
                                 order_by='DesignSystemChange.Id')

    def to_summary(self):
        return {
            "id": self.Id,
            "versionName": self.VersionName,
            "description": self.Description,
            "createdAt": _iso(self.CreatedAt),
            "userId": self.UserId,
            "isSnapshot": bool(self.IsSnapshot),
            "parentVersionId": self.ParentVersionId,
        }

    def to_dict(self):
        d = self.to_summary()
        d.update({
            "clientId": self.ClientId,
            "rawTokens": self.RawTokens,
            "semanticTokens": self.SemanticTokens,
            "changesSummary": self.ChangesSummary or [],
            "figmaConnectionId": self.FigmaConnectionId,
            "syncLogId": self.SyncLogId,
        })
        return d


class DesignSystemChange(db.Model):
    __tablename__ = 'DesignSystemChange'
    Id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    VersionId = db.Column(db.Integer, db.ForeignKey('DesignSystemVersion.Id'), nullable=False, index=True)
    TokenType = db.Column(db.String(30), nullable=False)    # typography|color|spacing|border_radius|shadow|component
    TokenPath = db.Column(db.String(255), nullable=False)
    ChangeType = db.Column(db.String(20), nullable=False)   # created|updated|deleted
    OldValue = db.Column(db.JSON, nullable=True)
    NewValue = db.Column(db.JSON, nullable=True)
    ChangeSource = db.Column(db.String(20), nullable=False)  # manual_edit|figma_pull|figma_push|api_update
    CreatedAt = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            "id": self.Id,
            "versionId": self.VersionId,
            "tokenType": self.TokenType,
            "tokenPath": self.TokenPath,
            "changeType": self.ChangeType,
            "oldValue": self.OldValue,
            "newValue": self.NewValue,
            "changeSource": self.ChangeSource,
            "createdAt": _iso(self.CreatedAt),
        }


class CurrentTokens(db.Model):
    """Materialized current tokens per client; rebuildable from the latest version."""
    __tablename__ = 'CurrentTokens'
    ClientId = db.Column(db.Integer, db.ForeignKey('Client.Id'), primary_key=True)
    VersionId = db.Column(db.Integer, db.ForeignKey('DesignSystemVersion.Id'), nullable=True)
    RawTokens = db.Column(db.JSON, nullable=False)
    SemanticTokens = db.Column(db.JSON, nullable=False)
    UpdatedAt = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
