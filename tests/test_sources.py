"""
End-to-end tests for data source handlers against SQLite.
"""

import argparse
from datetime import date, datetime

import pytest
import yaml
from sqlalchemy.dialects import mysql

import run_query
from core.config import Config
from core.container import Container
from core.errors import (
    MissingParameterError,
    RetiredSourceError,
    TooManyCredentialsError,
    UnauthenticatedError,
    UnauthorizedSensorError,
    UnknownSourceError,
)
from models import (
    CdcExtract,
    Fluview,
    FluviewImputed,
    Forecast,
    GoogleFluTrends,
    NidssDengue,
    NorostatLocation,
    NorostatPointDiff,
    NorostatRelease,
    Quidel,
    Sensor,
    Twitter,
    WikiAccess,
    WikiMeta,
)
from query.filters import FilterKind, FilterList
from sources import EpidataRequest, get_registry


def epiweeks(*values):
    return FilterList.of(FilterKind.EPIWEEK, *values)


def strings(*values):
    return FilterList.of(FilterKind.STRING, *values)


def run(container, request):
    return get_registry().create_source(request.source, container).run(request)


class TestRegistry:
    """Source lookup."""

    def test_unknown_source(self, container):
        with pytest.raises(UnknownSourceError):
            get_registry().create_source('nonexistent', container)

    def test_lookup_is_case_insensitive(self, container):
        source = get_registry().create_source('FluView', container)
        assert source.name == 'fluview'

    def test_every_configured_source_is_registered(self, container):
        registered = set(get_registry().get_all())
        assert set(container.get_config().get_enabled_sources()) == registered

    @pytest.mark.parametrize('name, replacement', [
        ('ilinet', 'fluview'),
        ('stateili', 'fluview'),
        ('SIGNALS', 'sensors'),
    ])
    def test_retired_source_names_replacement(self, container, name, replacement):
        with pytest.raises(RetiredSourceError) as exc:
            get_registry().create_source(name, container)
        assert str(exc.value) == f'use {replacement} instead'

    def test_missing_parameters(self, container):
        with pytest.raises(MissingParameterError) as exc:
            run(container, EpidataRequest('fluview', epiweeks=epiweeks(201501)))
        assert str(exc.value) == 'missing parameter: need [epiweeks, regions]'


class TestFluview:
    """Public table plus the privileged imputed overlay."""

    @pytest.fixture
    def fluview_rows(self, insert):
        insert(
            Fluview(release_date=date(2015, 1, 9), issue=201502, epiweek=201501, region='nat',
                    lag=1, num_ili=100, num_patients=1000, wili=2.5, ili=2.4),
            Fluview(release_date=date(2015, 1, 2), issue=201501, epiweek=201501, region='nat',
                    lag=0, num_ili=90, num_patients=1000, wili=2.2, ili=2.1),
            FluviewImputed(issue=201502, epiweek=201501, region='ny', lag=1, num_ili=7, ili=1.5),
            FluviewImputed(issue=201502, epiweek=201501, region='jfk', lag=1, num_ili=3, ili=0.5),
        )

    def test_public_only(self, container, fluview_rows):
        rows = run(container, EpidataRequest('fluview', epiweeks=epiweeks(201501),
                                             regions=strings('nat')))
        assert len(rows) == 1
        assert rows[0]['issue'] == 201502
        assert rows[0]['release_date'] == '2015-01-09'
        assert rows[0]['wili'] == 2.5

    def test_ny_is_released_without_token(self, container, fluview_rows):
        rows = run(container, EpidataRequest('fluview', epiweeks=epiweeks(201501),
                                             regions=strings('nat', 'NY', 'jfk')))
        assert [row['region'] for row in rows] == ['nat', 'ny']

        imputed = rows[1]
        assert imputed['release_date'] is None
        assert imputed['wili'] == imputed['ili'] == 1.5
        assert imputed['num_age_0'] is None

    def test_token_unlocks_imputed_regions(self, container, fluview_rows):
        rows = run(container, EpidataRequest('fluview', epiweeks=epiweeks(201501),
                                             regions=strings('jfk'),
                                             credentials=('fluview-token',)))
        assert [(row['region'], row['num_ili']) for row in rows] == [('jfk', 3)]

    def test_wrong_token_is_public_access(self, container, fluview_rows):
        rows = run(container, EpidataRequest('fluview', epiweeks=epiweeks(201501),
                                             regions=strings('jfk'), credentials=('nope',)))
        assert rows == []

    def test_explicit_issue(self, container, fluview_rows):
        rows = run(container, EpidataRequest('fluview', epiweeks=epiweeks(201501),
                                             regions=strings('nat'), issues=epiweeks(201501)))
        assert [row['num_ili'] for row in rows] == [90]

    def test_lag(self, container, fluview_rows):
        rows = run(container, EpidataRequest('fluview', epiweeks=epiweeks(201501),
                                             regions=strings('nat'), lag=0))
        assert [row['issue'] for row in rows] == [201501]


class TestGatedSources:
    """Sources that need their own access token."""

    @pytest.fixture
    def quidel_rows(self, insert):
        insert(Quidel(location='hhs1', epiweek=201501, value=0.25))

    def test_token_required(self, container, quidel_rows):
        with pytest.raises(MissingParameterError):
            run(container, EpidataRequest('quidel', epiweeks=epiweeks(201501),
                                          locations=strings('hhs1')))

    def test_wrong_token(self, container, quidel_rows):
        with pytest.raises(UnauthenticatedError):
            run(container, EpidataRequest('quidel', epiweeks=epiweeks(201501),
                                          locations=strings('hhs1'), credentials=('nope',)))

    def test_two_tokens(self, container, quidel_rows):
        with pytest.raises(TooManyCredentialsError):
            run(container, EpidataRequest('quidel', epiweeks=epiweeks(201501),
                                          locations=strings('hhs1'),
                                          credentials=('quidel-token', 'cdc-token')))

    def test_valid_token(self, container, quidel_rows):
        rows = run(container, EpidataRequest('quidel', epiweeks=epiweeks(201501),
                                             locations=strings('hhs1'),
                                             credentials=('quidel-token',)))
        assert rows == [{'location': 'hhs1', 'epiweek': 201501, 'value': 0.25}]

    def test_cdc_rollup(self, container, insert):
        insert(
            CdcExtract(epiweek=201501, state='ma', num1=1, num2=0, num3=0, num4=0, num5=0,
                       num6=0, num7=0, num8=0, total=4),
            CdcExtract(epiweek=201501, state='ny', num1=2, num2=0, num3=0, num4=0, num5=0,
                       num6=0, num7=0, num8=0, total=6),
        )
        rows = run(container, EpidataRequest('cdc', epiweeks=epiweeks(201501),
                                             locations=strings('nat', 'ma'),
                                             credentials=('cdc-token',)))
        assert [(row['location'], row['num1'], row['total']) for row in rows] == [
            ('nat', 3, 10),
            ('ma', 1, 4),
        ]

    def test_twitter_weekly_uses_yearweek(self, container):
        source = get_registry().create_source('twitter', container)
        plans = source.plan(EpidataRequest('twitter', epiweeks=epiweeks(201501),
                                           locations=strings('nat'),
                                           credentials=('twitter-token',)))
        sql = str(plans[0].statement.compile(dialect=mysql.dialect()))
        assert 'yearweek(twitter.date, %s)' in sql
        assert 'epiweek' in plans[0].manifest.integers

    def test_twitter_daily_rollup(self, container, insert):
        insert(
            Twitter(date=date(2015, 1, 5), state='ma', num=1, total=100),
            Twitter(date=date(2015, 1, 5), state='ct', num=1, total=100),
            Twitter(date=date(2015, 1, 5), state='pa', num=1, total=2),
        )
        rows = run(container, EpidataRequest('twitter', dates=FilterList.of(FilterKind.DATE, 20150105),
                                             locations=strings('nat', 'hhs1', 'pa'),
                                             credentials=('twitter-token',)))

        assert [(row['location'], row['date'], row['num'], row['total']) for row in rows] == [
            ('nat', '2015-01-05', 2, 200),
            ('hhs1', '2015-01-05', 2, 200),
        ]
        assert [row['percent'] for row in rows] == [pytest.approx(1.0), pytest.approx(1.0)]


class TestSensors:
    """Tiered sensor authorization through the sensors source."""

    @pytest.fixture
    def sensor_rows(self, insert):
        insert(
            Sensor(name='sar3', location='nat', epiweek=201501, value=1.0),
            Sensor(name='gft', location='nat', epiweek=201501, value=2.0),
        )

    def test_open_sensor(self, container, sensor_rows):
        rows = run(container, EpidataRequest('sensors', names=strings('sar3'),
                                             locations=strings('nat'), epiweeks=epiweeks(201501)))
        assert rows == [{'name': 'sar3', 'location': 'nat', 'epiweek': 201501, 'value': 1.0}]

    def test_gated_sensor_without_token(self, container, sensor_rows):
        with pytest.raises(UnauthorizedSensorError) as exc:
            run(container, EpidataRequest('sensors', names=strings('sar3', 'gft'),
                                          locations=strings('nat'), epiweeks=epiweeks(201501)))
        assert exc.value.names == ['gft']

    def test_granular_token(self, container, sensor_rows):
        rows = run(container, EpidataRequest('sensors', names=strings('sar3', 'gft'),
                                             locations=strings('nat'), epiweeks=epiweeks(201501),
                                             credentials=('gft-token',)))
        assert [row['name'] for row in rows] == ['gft', 'sar3']

    def test_global_token(self, container, sensor_rows):
        rows = run(container, EpidataRequest('sensors', names=strings('gft'),
                                             locations=strings('nat'), epiweeks=epiweeks(201501),
                                             credentials=('global-sensors-token',)))
        assert len(rows) == 1


class TestOpenSources:
    """Unrestricted tables."""

    def test_forecast_json_is_decoded(self, container, insert):
        insert(Forecast(system='af', epiweek=201501, json='{"season": 2014}'))
        rows = run(container, EpidataRequest('delphi', system='af', epiweek=201501))
        assert rows == [{'system': 'af', 'epiweek': 201501, 'forecast': {'season': 2014}}]

    def test_wiki_daily(self, container, insert):
        insert(
            WikiAccess(datetime=datetime(2015, 1, 1, 3), article='influenza', count=50,
                       language='en'),
            WikiMeta(datetime=datetime(2015, 1, 1, 3), date=date(2015, 1, 1), epiweek=201453,
                     total=1000000, language='en'),
        )
        rows = run(container, EpidataRequest(
            'wiki', articles=strings('influenza'), language='en',
            dates=FilterList.of(FilterKind.DATE, 20150101)))
        assert rows == [{'date': '2015-01-01', 'article': 'influenza', 'count': 50,
                         'total': 1000000, 'value': 50.0, 'hour': -1}]

    def test_wiki_needs_dates_or_epiweeks(self, container):
        with pytest.raises(MissingParameterError):
            run(container, EpidataRequest('wiki', articles=strings('influenza'), language='en'))

    def test_empty_result(self, container):
        rows = run(container, EpidataRequest('gft', epiweeks=epiweeks(201501),
                                             locations=strings('nat')))
        assert rows == []


class TestNidssDengue:
    """Counts summed per location, region or nationwide."""

    @pytest.fixture
    def dengue_rows(self, insert):
        insert(
            NidssDengue(epiweek=201501, location='taipei', region='north', count=3),
            NidssDengue(epiweek=201501, location='keelung', region='north', count=2),
            NidssDengue(epiweek=201501, location='tainan', region='south', count=5),
            NidssDengue(epiweek=201502, location='taipei', region='north', count=1),
        )

    def test_location_region_and_nationwide(self, container, dengue_rows):
        rows = run(container, EpidataRequest('nidss_dengue', epiweeks=epiweeks((201501, 201502)),
                                             locations=strings('north', 'tainan', 'nationwide')))
        assert rows == [
            {'epiweek': 201501, 'location': 'north', 'count': 5},
            {'epiweek': 201502, 'location': 'north', 'count': 1},
            {'epiweek': 201501, 'location': 'tainan', 'count': 5},
            {'epiweek': 201501, 'location': 'nationwide', 'count': 10},
            {'epiweek': 201502, 'location': 'nationwide', 'count': 1},
        ]

    def test_unmatched_location_is_empty(self, container, dengue_rows):
        rows = run(container, EpidataRequest('nidss_dengue', epiweeks=epiweeks(201501),
                                             locations=strings('kaohsiung')))
        assert rows == []


class TestNorostat:
    """Latest revision per epiweek, behind the norostat token."""

    LOCATION = 'Minnesota, Ohio, Oregon, Tennessee, and Wisconsin'

    @pytest.fixture
    def norostat_rows(self, insert):
        first = datetime(2015, 1, 10, 12, 0)
        second = datetime(2015, 1, 17, 12, 0)
        third = datetime(2015, 1, 24, 12, 0)
        insert(
            NorostatLocation(location_id=1, location=self.LOCATION),
            NorostatLocation(location_id=2, location='Other'),
            NorostatRelease(release_date=date(2015, 1, 10), parse_time=first),
            NorostatRelease(release_date=date(2015, 1, 17), parse_time=second),
            NorostatRelease(release_date=date(2015, 1, 17), parse_time=second.replace(hour=18)),
            NorostatRelease(release_date=date(2015, 1, 24), parse_time=third),
            NorostatPointDiff(release_date=date(2015, 1, 10), parse_time=first,
                              location_id=1, epiweek=201501, new_value=3),
            NorostatPointDiff(release_date=date(2015, 1, 17), parse_time=second,
                              location_id=1, epiweek=201501, new_value=4),
            NorostatPointDiff(release_date=date(2015, 1, 24), parse_time=third,
                              location_id=1, epiweek=201501, new_value=None),
            NorostatPointDiff(release_date=date(2015, 1, 17), parse_time=second,
                              location_id=1, epiweek=201502, new_value=5),
            NorostatPointDiff(release_date=date(2015, 1, 17), parse_time=second.replace(hour=18),
                              location_id=1, epiweek=201502, new_value=6),
            NorostatPointDiff(release_date=date(2015, 1, 24), parse_time=third,
                              location_id=2, epiweek=201501, new_value=99),
        )

    def request(self, **overrides):
        values = dict(location=self.LOCATION, epiweeks=epiweeks((201501, 201510)),
                      credentials=('norostat-token',))
        values.update(overrides)
        return EpidataRequest('norostat', **values)

    def test_latest_revision_wins(self, container, norostat_rows):
        assert run(container, self.request()) == [
            {'release_date': '2015-01-17', 'epiweek': 201501, 'value': 4},
            {'release_date': '2015-01-17', 'epiweek': 201502, 'value': 6},
        ]

    def test_wrong_token(self, container, norostat_rows):
        with pytest.raises(UnauthenticatedError):
            run(container, self.request(credentials=('fluview-token',)))

    def test_location_required(self, container, norostat_rows):
        with pytest.raises(MissingParameterError):
            run(container, self.request(location=None))

    def test_meta_lists_releases_and_locations(self, container, norostat_rows):
        rows = run(container, EpidataRequest('meta_norostat', credentials=('norostat-token',)))
        assert rows == [{
            'releases': [{'release_date': '2015-01-10'}, {'release_date': '2015-01-17'},
                         {'release_date': '2015-01-24'}],
            'locations': [{'location': self.LOCATION}, {'location': 'Other'}],
        }]

    def test_meta_needs_token(self, container):
        with pytest.raises(MissingParameterError):
            run(container, EpidataRequest('meta_norostat'))


class TestMeta:
    """Freshness summary across tables."""

    def test_summary(self, container, insert):
        insert(
            Fluview(release_date=date(2015, 1, 9), issue=201502, epiweek=201501, region='nat',
                    lag=1, num_ili=100),
            Fluview(release_date=date(2015, 1, 2), issue=201501, epiweek=201501, region='nat',
                    lag=0, num_ili=90),
            Twitter(date=date(2015, 1, 4), state='ma', num=1, total=100),
            Twitter(date=date(2015, 1, 5), state='ma', num=1, total=100),
            Twitter(date=date(2015, 1, 5), state='ct', num=2, total=100),
            Forecast(system='af', epiweek=201501, json='{}'),
            Forecast(system='af', epiweek=201503, json='{}'),
        )
        rows = run(container, EpidataRequest('meta'))

        assert rows == [{
            'fluview': [{'latest_update': '2015-01-09', 'latest_issue': 201502, 'table_rows': 2}],
            'twitter': [{'latest_update': '2015-01-05', 'table_rows': 3, 'num_states': 2}],
            'wiki': [{'latest_update': None, 'table_rows': 0}],
            'delphi': [{'system': 'af', 'first_week': 201501, 'last_week': 201503, 'num_weeks': 2}],
        }]

    def test_empty_tables(self, container):
        summary = run(container, EpidataRequest('meta'))[0]
        assert summary['twitter'] is None
        assert summary['delphi'] is None
        assert summary['fluview'] == [{'latest_update': None, 'latest_issue': None, 'table_rows': 0}]


class TestResultLimit:
    """Rows are capped at the configured maximum."""

    @pytest.fixture
    def small_container(self, tmp_path, session_factory):
        config = yaml.safe_load(Config()._config_path.read_text())
        config['global']['max_results'] = 2
        path = tmp_path / 'sources.yaml'
        path.write_text(yaml.safe_dump(config))

        container = Container(Config(path))
        container.set_db_session_factory(session_factory)
        return container

    def test_rows_capped(self, small_container, insert):
        insert(*[GoogleFluTrends(epiweek=201501 + i, location='nat', num=i) for i in range(3)])
        rows = run(small_container, EpidataRequest('gft', epiweeks=epiweeks((201501, 201510)),
                                                   locations=strings('nat')))
        assert [row['epiweek'] for row in rows] == [201501, 201502]


class TestCommandLine:
    """Request parsing and the response envelope."""

    def args(self, **overrides):
        values = {name: None for name in run_query.FILTER_PARAMS}
        values.update(source='fluview', location=None, lag=None, auth=None, query=None, language=None,
                      system=None, epiweek=None)
        values.update(overrides)
        return argparse.Namespace(**values)

    def test_build_request(self):
        request = run_query.build_request(self.args(
            epiweeks='201440-201510,201520', regions='nat,ny', auth=['a', 'b,c']))

        assert request.epiweeks == FilterList.of(FilterKind.EPIWEEK, (201440, 201510), 201520)
        assert request.regions.values() == ['nat', 'ny']
        assert request.credentials == ('a', 'b', 'c')
        assert request.issues is None

    def test_success_envelope(self, container, insert):
        insert(GoogleFluTrends(epiweek=201501, location='nat', num=4))
        request = run_query.build_request(self.args(source='gft', epiweeks='201501',
                                                    locations='nat'))
        response = run_query.run_request(container, request)

        assert response['result'] == 1
        assert response['message'] == 'success'
        assert response['epidata'] == [{'epiweek': 201501, 'location': 'nat', 'num': 4}]

    def test_no_results_envelope(self, container):
        request = run_query.build_request(self.args(source='gft', epiweeks='201501',
                                                    locations='nat'))
        assert run_query.run_request(container, request) == {'result': -2, 'message': 'no results'}

    def test_error_envelope(self, container):
        request = run_query.build_request(self.args(source='unknown'))
        assert run_query.run_request(container, request) == {
            'result': -1, 'message': 'no data source specified'}

    def test_retired_source_envelope(self, container):
        request = run_query.build_request(self.args(source='signals'))
        assert run_query.run_request(container, request) == {
            'result': -1, 'message': 'use sensors instead'}

    def test_storage_error_envelope(self, container, session_factory):
        GoogleFluTrends.__table__.drop(session_factory.engine)
        request = run_query.build_request(self.args(source='gft', epiweeks='201501',
                                                    locations='nat'))
        assert run_query.run_request(container, request) == {
            'result': -1, 'message': 'database error'}
