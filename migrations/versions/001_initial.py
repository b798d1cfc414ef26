
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'base_mapping',
        sa.Column('base_id', sa.String(length=32), primary_key=True),
        sa.Column('company_code', sa.String(length=32), nullable=True),
        sa.Column('base_number', sa.String(length=32), nullable=True),
        sa.Column('iata', sa.String(length=8), nullable=True),
        sa.Column('icao', sa.String(length=8), nullable=True),
        sa.Column('region', sa.String(length=64), nullable=True),
        sa.Column('business_division', sa.String(length=64), nullable=True),
        sa.Column('base_description', sa.String(length=255), nullable=True),
        sa.Column('fbo_name', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=128), nullable=True),
        sa.Column('state', sa.String(length=64), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('currency_code', sa.String(length=8), nullable=True),
        sa.Column('default_units', sa.String(length=16), nullable=True),
        sa.Column('base_country', sa.String(length=64), nullable=True),
        sa.Column('base_time_zone', sa.String(length=64), nullable=True),
    )

    op.create_table(
        'base_email_preferences',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('base_preference', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_base_email_preferences_email', 'base_email_preferences', ['email'], unique=True)

    op.create_table(
        'reservations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reservation_no', sa.String(length=64), nullable=False),
        sa.Column('base_id', sa.String(length=32), nullable=True),
        sa.Column('reservation_name', sa.String(length=255), nullable=True),
        sa.Column('customer_account_number', sa.String(length=64), nullable=True),
        sa.Column('tail_number', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=64), nullable=True),
        sa.Column('reservation_type', sa.String(length=64), nullable=True),
        sa.Column('est_arrival_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('act_arrival_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('est_departure_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('act_departure_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('fbo_name', sa.String(length=255), nullable=True),
        sa.Column('res_created_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('flight_name', sa.String(length=255), nullable=True),
        sa.Column('flight_model', sa.String(length=255), nullable=True),
        sa.Column('flight_type', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_reservations_reservation_no', 'reservations', ['reservation_no'], unique=True)
    op.create_index('ix_reservations_base_id', 'reservations', ['base_id'])
    op.create_index('ix_reservations_tail_number', 'reservations', ['tail_number'])

    op.create_table(
        'reservation_services',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reservation_id', sa.Uuid(), sa.ForeignKey('reservations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('product_id', sa.String(length=64), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('product_status', sa.String(length=64), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('service_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('subcase_id', sa.String(length=64), nullable=True),
        sa.Column('for_arrival_or_departure', sa.String(length=32), nullable=True),
        sa.Column('dsf_product_name', sa.String(length=255), nullable=True),
        sa.Column('service_request_details', sa.Text(), nullable=True),
        sa.Column('vendor_name', sa.String(length=255), nullable=True),
        sa.Column('on_arrival', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('on_departure', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('phone_number', sa.String(length=64), nullable=True),
        sa.Column('email_address', sa.String(length=255), nullable=True),
        sa.Column('quoted_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('special_instruction_value', sa.Text(), nullable=True),
        sa.Column('vendor_rep', sa.String(length=255), nullable=True),
        sa.Column('crew_meal_count', sa.Integer(), nullable=True),
        sa.Column('pax_meal_count', sa.Integer(), nullable=True),
        sa.Column('crew_or_passenger', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_reservation_services_reservation_id', 'reservation_services', ['reservation_id'])

    op.create_table(
        'consents',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reservation_id', sa.Uuid(), sa.ForeignKey('reservations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('terms_and_conditions', sa.Text(), nullable=False),
        sa.Column('terms_version', sa.String(length=64), nullable=False),
        sa.Column('geo_location', sa.String(length=255), nullable=True),
        sa.Column('channel', sa.String(length=64), nullable=False),
        sa.Column('signature_image', sa.LargeBinary(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('reservation_id', name='uq_consents_reservation'),
    )

def downgrade():
    op.drop_table('consents')
    op.drop_index('ix_reservation_services_reservation_id', table_name='reservation_services')
    op.drop_table('reservation_services')
    op.drop_index('ix_reservations_tail_number', table_name='reservations')
    op.drop_index('ix_reservations_base_id', table_name='reservations')
    op.drop_index('ix_reservations_reservation_no', table_name='reservations')
    op.drop_table('reservations')
    op.drop_index('ix_base_email_preferences_email', table_name='base_email_preferences')
    op.drop_table('base_email_preferences')
    op.drop_table('base_mapping')
