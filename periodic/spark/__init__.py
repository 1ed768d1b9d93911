from periodic.spark.periods_df import PeriodsDF
