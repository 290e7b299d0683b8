from django.urls import path
from . import views

urlpatterns = [
    # Plannings (projects)
    path('Plannings/GetAll', views.planning_list, name='planning-list'),
    path('Plannings/CreatePlanningWithActivities', views.planning_create_with_activities, name='planning-create'),
    path('Plannings/Options', views.planning_options, name='planning-options'),
    path('Plannings/Export', views.planning_export, name='planning-export'),
    path('Plannings/<int:pk>', views.planning_detail, name='planning-detail'),
    path('Plannings/<int:pk>/ProjectActivities', views.planning_activities, name='planning-activities'),

    # Project activities
    path('ProjectActivities', views.project_activity_create, name='project-activity-create'),
    path('ProjectActivities/<int:pk>', views.project_activity_detail, name='project-activity-detail'),

    # Quick notes
    path('ProjectQuickNotes/GetProjectQuickNotesWithPlanningId/<int:planning_id>',
         views.quick_notes_by_planning, name='project-quick-notes-by-planning'),
    path('ProjectQuickNotes', views.quick_note_create, name='project-quick-note-create'),
    path('ProjectQuickNotes/<int:pk>', views.quick_note_detail, name='project-quick-note-detail'),
]
