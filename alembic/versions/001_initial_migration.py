"""Initial migration - users, tickets, messages, reviews, blog posts

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

ROLE = sa.Enum('admin', 'agent', 'customer', name='role')
TICKET_STATUS = sa.Enum('open', 'inprogress', 'resolved', 'closed', name='ticketstatus')
TICKET_PRIORITY = sa.Enum('low', 'medium', 'high', 'urgent', name='ticketpriority')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('fullname', sa.String(200), nullable=False),
        sa.Column('role', ROLE, nullable=False),
        sa.Column('bio', sa.Text()),
        sa.Column('avatar_url', sa.String(500)),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('last_login', sa.DateTime()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'tickets',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', TICKET_STATUS, nullable=False),
        sa.Column('priority', TICKET_PRIORITY, nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('customer_email', sa.String(255), nullable=False),
        sa.Column('assigned_agent_id', sa.Uuid(), sa.ForeignKey('users.id')),
        sa.Column('assigned_agent_name', sa.String(200)),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('resolved_at', sa.DateTime()),
    )
    op.create_index('ix_tickets_customer_id', 'tickets', ['customer_id'])
    op.create_index('ix_tickets_assigned_agent_id', 'tickets', ['assigned_agent_id'])

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('ticket_id', sa.Uuid(), sa.ForeignKey('tickets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('sender_name', sa.String(200), nullable=False),
        sa.Column('sender_role', ROLE, nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('edited', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_messages_ticket_id', 'messages', ['ticket_id'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('ticket_id', sa.Uuid(), sa.ForeignKey('tickets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('ticket_title', sa.String(255), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('agent_reply', sa.Text()),
        sa.Column('agent_id', sa.Uuid(), sa.ForeignKey('users.id')),
        sa.Column('agent_name', sa.String(200)),
        sa.Column('replied_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('ticket_id', 'customer_id', name='uq_reviews_ticket_customer'),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_reviews_rating_range'),
    )
    op.create_index('ix_reviews_ticket_id', 'reviews', ['ticket_id'])

    op.create_table(
        'blog_posts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('excerpt', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('image_url', sa.String(500)),
        sa.Column('author_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('author_name', sa.String(200), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_blog_posts_category', 'blog_posts', ['category'])


def downgrade() -> None:
    op.drop_table('blog_posts')
    op.drop_table('reviews')
    op.drop_table('messages')
    op.drop_table('tickets')
    op.drop_table('users')
    bind = op.get_bind()
    TICKET_PRIORITY.drop(bind, checkfirst=True)
    TICKET_STATUS.drop(bind, checkfirst=True)
    ROLE.drop(bind, checkfirst=True)
